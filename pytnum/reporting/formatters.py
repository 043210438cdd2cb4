"""Output formatters for pytnum reports."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any

from pytnum.analysis.precision import PrecisionReport, Relation
from pytnum.analysis.refuter import RefutationResult
from pytnum.core.solver import Verdict
from pytnum.logging import Colors, paint

Report = PrecisionReport | RefutationResult


class Formatter(ABC):
    """Base class for output formatters."""

    name: str = "base"
    extension: str = ".txt"

    def format(self, report: Report) -> str:
        if isinstance(report, PrecisionReport):
            return self.format_precision(report)
        if isinstance(report, RefutationResult):
            return self.format_refutation(report)
        raise TypeError(f"cannot format {type(report).__name__}")

    @abstractmethod
    def format_precision(self, report: PrecisionReport) -> str:
        """Format a comparator report."""

    @abstractmethod
    def format_refutation(self, result: RefutationResult) -> str:
        """Format a refutation result."""

    def save(self, report: Report, filepath: str) -> None:
        """Save formatted report to file."""
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(self.format(report))


class TextFormatter(Formatter):
    """Plain text formatter."""

    name = "text"
    extension = ".txt"

    VERDICT_COLORS = {
        Verdict.SAT: Colors.RED,
        Verdict.UNSAT: Colors.GREEN,
        Verdict.UNKNOWN: Colors.YELLOW,
    }

    def __init__(self, color: bool = False, show_timing: bool = True):
        self.color = color
        self.show_timing = show_timing

    def _paint(self, text: str, color: str) -> str:
        return paint(text, color, self.color)

    def format_precision(self, report: PrecisionReport) -> str:
        counts = report.counts
        lines = [
            "=== fast_divide vs sdiv precision ===",
            f"dividends: value, mask in [0, {report.max_value}] with value & mask == 0",
            f"divisors:  [{report.divisor_min}, {report.divisor_max}]",
            "",
            f"total cases: {counts.total}",
        ]
        for relation in Relation:
            line = (
                f"  {relation.value:<13} {counts.count(relation):>12} "
                f"({counts.percentage(relation):.2f}%)"
            )
            if relation is Relation.INCOMPARABLE and counts.incomparable:
                line = self._paint(line, Colors.YELLOW)
            lines.append(line)
        if counts.samples:
            lines.append("")
            lines.append("incomparable samples:")
            for sample in counts.samples:
                lines.append(
                    f"  {sample.dividend!r} / {sample.divisor}: "
                    f"fast={sample.fast!r} sdiv={sample.reference!r}"
                )
        if self.show_timing:
            lines.append("")
            lines.append(f"time: {report.elapsed_seconds:.3f}s ({report.workers} workers)")
        return "\n".join(lines)

    def format_refutation(self, result: RefutationResult) -> str:
        mode = "symbolic dividends" if result.symbolic else "constant pairs"
        verdict = result.verdict.value.upper()
        lines = [
            f"=== fast_divide soundness ({mode}) ===",
            f"disjuncts: {result.pairs_checked}",
            f"verdict:   {self._paint(verdict, self.VERDICT_COLORS[result.verdict])}",
        ]
        if result.verdict is Verdict.UNKNOWN and result.reason:
            lines.append(f"reason:    {result.reason}")
        cex = result.counterexample
        if cex is not None:
            lines.append("")
            lines.append("counterexample:")
            if cex.dividend_tnum is not None:
                lines.append(f"  dividend tnum: {cex.dividend_tnum!r}")
            lines.extend(
                [
                    f"  dividend: {cex.dividend}",
                    f"  divisor:  {cex.divisor}",
                    f"  quotient: {cex.quotient}",
                    f"  reported: value={cex.value:#x} mask={cex.mask:#x}",
                    "containment check:",
                    f"  quotient ^ value   = {cex.xor:#x}",
                    f"  ~mask              = {cex.inverted_mask:#x}",
                    f"  (q ^ value) & ~mask = {cex.masked:#x}",
                    f"  contained: {str(cex.contained).lower()}",
                ]
            )
        if self.show_timing:
            lines.append("")
            lines.append(f"time: {result.elapsed_seconds:.3f}s")
        return "\n".join(lines)


class JSONFormatter(Formatter):
    """JSON formatter for machine-readable output."""

    name = "json"
    extension = ".json"

    def __init__(self, indent: int = 2):
        self.indent = indent

    def format_precision(self, report: PrecisionReport) -> str:
        counts = report.counts
        data: dict[str, Any] = {
            "mode": "compare",
            "bounds": {
                "max_value": report.max_value,
                "divisor_min": report.divisor_min,
                "divisor_max": report.divisor_max,
            },
            "total": counts.total,
            "relations": {
                relation.value: {
                    "count": counts.count(relation),
                    "percentage": round(counts.percentage(relation), 4),
                }
                for relation in Relation
            },
            "incomparable_samples": [
                {
                    "dividend": {"value": s.dividend.value, "mask": s.dividend.mask},
                    "divisor": s.divisor,
                    "fast": {"value": s.fast.value, "mask": s.fast.mask},
                    "sdiv": {"value": s.reference.value, "mask": s.reference.mask},
                }
                for s in counts.samples
            ],
            "elapsed_seconds": report.elapsed_seconds,
        }
        return json.dumps(data, indent=self.indent)

    def format_refutation(self, result: RefutationResult) -> str:
        data: dict[str, Any] = {
            "mode": "refute",
            "symbolic": result.symbolic,
            "verdict": result.verdict.value,
            "reason": result.reason,
            "pairs_checked": result.pairs_checked,
            "counterexample": (
                result.counterexample.to_dict() if result.counterexample is not None else None
            ),
            "elapsed_seconds": result.elapsed_seconds,
        }
        return json.dumps(data, indent=self.indent)


def format_report(report: Report, format_type: str = "text", **kwargs) -> str:
    """
    Format a comparator report or a refutation result.
    Args:
        report: The report to format
        format_type: One of "text", "json"
        **kwargs: Additional formatter options
    Returns:
        Formatted string
    """
    formatters: dict[str, type[Formatter]] = {
        "text": TextFormatter,
        "json": JSONFormatter,
    }
    formatter_class = formatters.get(format_type.lower(), TextFormatter)
    return formatter_class(**kwargs).format(report)


__all__ = [
    "Formatter",
    "TextFormatter",
    "JSONFormatter",
    "format_report",
]
