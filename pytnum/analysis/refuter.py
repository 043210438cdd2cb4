"""SMT-backed soundness refutation for constant division.
The refuter asks Z3 for a dividend/divisor pair whose true unsigned quotient
lies outside the tnum reported by the operator under test:

    n == a && d == b && ((n /u d) ^ R.value) & ~R.mask != 0

with one disjunct per pair ``(a, b)`` of the bounded range and
``R = op(const(a), const(b))``. UNSAT means no pair in the range is a
counterexample. Solver errors and timeouts yield UNKNOWN.

``refute_symbolic_dividends`` widens the dividend to every tnum with a small
mask so that ``n`` ranges symbolically over its concretization.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import z3

from pytnum.config import RefuteConfig
from pytnum.core.bits import MASK64, WORD_BITS
from pytnum.core.solver import SolverResult, SolverSession, Verdict
from pytnum.core.tnum import Tnum
from pytnum.logging import get_logger
from pytnum.ops.divide import fast_divide

DivisionOperator = Callable[[Tnum, Tnum], Tnum]


def concrete_udiv(n: int, d: int) -> int:
    """Unsigned division with the SMT-LIB convention ``n / 0 == all ones``."""
    if d == 0:
        return MASK64
    return n // d


@dataclass(frozen=True)
class Counterexample:
    """A witnessed soundness violation with its containment derivation."""

    dividend: int
    divisor: int
    quotient: int
    value: int
    mask: int
    dividend_tnum: Tnum | None = None

    @property
    def xor(self) -> int:
        return self.quotient ^ self.value

    @property
    def inverted_mask(self) -> int:
        return ~self.mask & MASK64

    @property
    def masked(self) -> int:
        return self.xor & self.inverted_mask

    @property
    def contained(self) -> bool:
        return self.masked == 0

    def to_dict(self) -> dict[str, Any]:
        data = {
            "dividend": self.dividend,
            "divisor": self.divisor,
            "quotient": self.quotient,
            "value": self.value,
            "mask": self.mask,
            "xor": self.xor,
            "inverted_mask": self.inverted_mask,
            "masked": self.masked,
            "contained": self.contained,
        }
        if self.dividend_tnum is not None:
            data["dividend_tnum"] = {
                "value": self.dividend_tnum.value,
                "mask": self.dividend_tnum.mask,
            }
        return data


@dataclass
class RefutationResult:
    """Outcome of a refutation query."""

    verdict: Verdict
    counterexample: Counterexample | None = None
    reason: str | None = None
    pairs_checked: int = 0
    elapsed_seconds: float = 0.0
    symbolic: bool = False

    @property
    def refuted(self) -> bool:
        return self.verdict is Verdict.SAT


@dataclass(frozen=True)
class _Disjunct:
    dividend: Tnum
    divisor: int
    result: Tnum
    formula: z3.BoolRef


class SoundnessRefuter:
    """Driver for the refutation mode.
    Args:
        config: Bounds and solver settings.
        operator: Division under test; defaults to ``fast_divide`` at the
            configured divider width.
    """

    def __init__(
        self,
        config: RefuteConfig | None = None,
        operator: DivisionOperator | None = None,
    ):
        self.config = config or RefuteConfig()
        self.config.validate()
        if operator is None:
            width = self.config.divider_width

            def operator(a: Tnum, b: Tnum) -> Tnum:
                return fast_divide(a, b, width=width)

        self.operator = operator
        self.logger = get_logger()

    def run(self) -> RefutationResult:
        if self.config.symbolic_dividends:
            return self.refute_symbolic_dividends()
        return self.refute_constants()

    def _violation(self, n: z3.BitVecRef, d: z3.BitVecRef, result: Tnum) -> z3.BoolRef:
        return z3.Not(result.to_z3_constraint(z3.UDiv(n, d)))

    def _divisors(self) -> range:
        return range(self.config.divisor_min, self.config.divisor_max + 1)

    def refute_constants(self) -> RefutationResult:
        """Search constant dividend/divisor pairs of the configured range."""
        cfg = self.config
        n = SolverSession.word("n", WORD_BITS)
        d = SolverSession.word("d", WORD_BITS)
        disjuncts = []
        for a in range(cfg.dividend_min, cfg.dividend_max + 1):
            dividend = Tnum.const_val(a)
            for b in self._divisors():
                result = self.operator(dividend, Tnum.const_val(b))
                formula = z3.And(n == a, d == b, self._violation(n, d, result))
                disjuncts.append(_Disjunct(dividend, b, result, formula))
        return self._solve(n, d, disjuncts, symbolic=False)

    def refute_symbolic_dividends(self) -> RefutationResult:
        """Search dividends ``n ∈ γ(A)`` for every tnum ``A`` of the range.
        ``A`` ranges over the well-formed tnums with value in
        ``[dividend_min, dividend_max]`` and mask at most ``mask_max``.
        """
        cfg = self.config
        n = SolverSession.word("n", WORD_BITS)
        d = SolverSession.word("d", WORD_BITS)
        disjuncts = []
        for value in range(cfg.dividend_min, cfg.dividend_max + 1):
            for mask in range(cfg.mask_max + 1):
                if value & mask:
                    continue
                dividend = Tnum(value, mask)
                for b in self._divisors():
                    result = self.operator(dividend, Tnum.const_val(b))
                    formula = z3.And(
                        dividend.to_z3_constraint(n),
                        d == b,
                        self._violation(n, d, result),
                    )
                    disjuncts.append(_Disjunct(dividend, b, result, formula))
        return self._solve(n, d, disjuncts, symbolic=True)

    def _solve(
        self,
        n: z3.BitVecRef,
        d: z3.BitVecRef,
        disjuncts: list[_Disjunct],
        symbolic: bool,
    ) -> RefutationResult:
        session = SolverSession(timeout_ms=self.config.timeout_ms)
        session.add(z3.Or(*(item.formula for item in disjuncts)))
        self.logger.verbose(
            f"checking {len(disjuncts)} disjuncts",
            category="refute",
            timeout_ms=self.config.timeout_ms,
            symbolic=symbolic,
        )
        with self.logger.timer("solver check", category="refute"):
            outcome = session.check()
        self.logger.debug(
            f"solver answered {outcome.verdict.value}",
            category="refute",
            elapsed=f"{outcome.elapsed_seconds:.3f}s",
        )
        result = RefutationResult(
            verdict=outcome.verdict,
            reason=outcome.reason,
            pairs_checked=len(disjuncts),
            elapsed_seconds=outcome.elapsed_seconds,
            symbolic=symbolic,
        )
        if outcome.is_sat:
            result.counterexample = self._counterexample(outcome, n, d, disjuncts, symbolic)
        elif outcome.is_unknown:
            self.logger.warning(f"solver returned unknown: {outcome.reason}")
        return result

    def _counterexample(
        self,
        outcome: SolverResult,
        n: z3.BitVecRef,
        d: z3.BitVecRef,
        disjuncts: list[_Disjunct],
        symbolic: bool,
    ) -> Counterexample:
        dividend = outcome.eval_word(n)
        divisor = outcome.eval_word(d)
        witness = next(
            item
            for item in disjuncts
            if z3.is_true(outcome.model.eval(item.formula, model_completion=True))
        )
        return Counterexample(
            dividend=dividend,
            divisor=divisor,
            quotient=concrete_udiv(dividend, divisor),
            value=witness.result.value,
            mask=witness.result.mask,
            dividend_tnum=witness.dividend if symbolic else None,
        )


__all__ = [
    "DivisionOperator",
    "concrete_udiv",
    "Counterexample",
    "RefutationResult",
    "SoundnessRefuter",
]
