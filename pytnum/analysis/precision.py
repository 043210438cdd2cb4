"""Exhaustive precision comparison of ``fast_divide`` against ``sdiv``.
For every well-formed dividend tnum with ``value, mask <= max_value`` and
every constant divisor in ``[divisor_min, divisor_max]`` both results are
computed and their lattice relation is classified:
- FAST_MORE_PRECISE: fast ⊑ sdiv and not sdiv ⊑ fast
- SDIV_MORE_PRECISE: sdiv ⊑ fast and not fast ⊑ sdiv
- EQUAL: both directions hold
- INCOMPARABLE: neither holds; a precision disagreement worth inspecting
The work is split by dividend value into chunks that run inline or on a
process pool. Per-chunk counts are summed, so the totals do not depend on
the worker count.
"""

from __future__ import annotations

import time
from collections.abc import Iterator
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from enum import Enum

from pytnum.config import CompareConfig
from pytnum.core.tnum import Tnum
from pytnum.logging import get_logger
from pytnum.ops.divide import fast_divide, sdiv


class Relation(Enum):
    """Lattice relation between the fast and the reference result."""

    FAST_MORE_PRECISE = "fast⊑sdiv"
    SDIV_MORE_PRECISE = "sdiv⊑fast"
    EQUAL = "equal"
    INCOMPARABLE = "incomparable"


def compare_pair(fast: Tnum, reference: Tnum) -> Relation:
    """Classify the relation of two results of the same division."""
    fast_le = fast.le(reference)
    reference_le = reference.le(fast)
    if fast_le and reference_le:
        return Relation.EQUAL
    if fast_le:
        return Relation.FAST_MORE_PRECISE
    if reference_le:
        return Relation.SDIV_MORE_PRECISE
    return Relation.INCOMPARABLE


@dataclass(frozen=True)
class IncomparablePair:
    """A dividend/divisor pair whose two results are unordered."""

    dividend: Tnum
    divisor: int
    fast: Tnum
    reference: Tnum


@dataclass
class PrecisionCounts:
    """Per-relation counters, mergeable with ``+``."""

    total: int = 0
    fast_more_precise: int = 0
    sdiv_more_precise: int = 0
    equal: int = 0
    incomparable: int = 0
    samples: list[IncomparablePair] = field(default_factory=list)

    def record(self, relation: Relation) -> None:
        self.total += 1
        if relation is Relation.FAST_MORE_PRECISE:
            self.fast_more_precise += 1
        elif relation is Relation.SDIV_MORE_PRECISE:
            self.sdiv_more_precise += 1
        elif relation is Relation.EQUAL:
            self.equal += 1
        else:
            self.incomparable += 1

    def count(self, relation: Relation) -> int:
        return {
            Relation.FAST_MORE_PRECISE: self.fast_more_precise,
            Relation.SDIV_MORE_PRECISE: self.sdiv_more_precise,
            Relation.EQUAL: self.equal,
            Relation.INCOMPARABLE: self.incomparable,
        }[relation]

    def percentage(self, relation: Relation) -> float:
        """Share of ``relation`` in percent (0.0 for an empty run)."""
        if self.total == 0:
            return 0.0
        return self.count(relation) / self.total * 100.0

    def __add__(self, other: PrecisionCounts) -> PrecisionCounts:
        return PrecisionCounts(
            total=self.total + other.total,
            fast_more_precise=self.fast_more_precise + other.fast_more_precise,
            sdiv_more_precise=self.sdiv_more_precise + other.sdiv_more_precise,
            equal=self.equal + other.equal,
            incomparable=self.incomparable + other.incomparable,
            samples=self.samples + other.samples,
        )


@dataclass
class PrecisionReport:
    """Outcome of a comparator run."""

    counts: PrecisionCounts
    max_value: int
    divisor_min: int
    divisor_max: int
    workers: int
    elapsed_seconds: float = 0.0

    @property
    def has_disagreement(self) -> bool:
        return self.counts.incomparable > 0


@dataclass(frozen=True)
class ChunkTask:
    """Dividend values ``[value_start, value_stop)`` against every divisor."""

    value_start: int
    value_stop: int
    max_value: int
    divisor_min: int
    divisor_max: int
    sample_limit: int


def iter_dividends(value: int, max_value: int) -> Iterator[Tnum]:
    """Well-formed tnums with the given value and every mask up to ``max_value``."""
    for mask in range(max_value + 1):
        if value & mask:
            continue
        yield Tnum(value, mask)


def compare_chunk(task: ChunkTask) -> PrecisionCounts:
    """Classify every pair of one chunk. Runs in worker processes."""
    counts = PrecisionCounts()
    divisors = [Tnum.const_val(d) for d in range(task.divisor_min, task.divisor_max + 1)]
    for value in range(task.value_start, task.value_stop):
        for dividend in iter_dividends(value, task.max_value):
            for divisor in divisors:
                fast = fast_divide(dividend, divisor)
                reference = sdiv(dividend, divisor)
                relation = compare_pair(fast, reference)
                counts.record(relation)
                if relation is Relation.INCOMPARABLE and len(counts.samples) < task.sample_limit:
                    counts.samples.append(
                        IncomparablePair(dividend, divisor.value, fast, reference)
                    )
    return counts


class PrecisionComparator:
    """Driver for the enumeration mode."""

    def __init__(self, config: CompareConfig | None = None):
        self.config = config or CompareConfig()
        self.config.validate()
        self.logger = get_logger()

    def tasks(self) -> list[ChunkTask]:
        cfg = self.config
        return [
            ChunkTask(
                value_start=start,
                value_stop=min(start + cfg.chunk_size, cfg.max_value + 1),
                max_value=cfg.max_value,
                divisor_min=cfg.divisor_min,
                divisor_max=cfg.divisor_max,
                sample_limit=cfg.incomparable_samples,
            )
            for start in range(0, cfg.max_value + 1, cfg.chunk_size)
        ]

    def run(self) -> PrecisionReport:
        cfg = self.config
        tasks = self.tasks()
        self.logger.verbose(
            f"comparing fast_divide with sdiv over {len(tasks)} chunks",
            category="compare",
            max_value=cfg.max_value,
            divisors=f"[{cfg.divisor_min}, {cfg.divisor_max}]",
            workers=cfg.workers,
        )
        start = time.perf_counter()
        counts = PrecisionCounts()
        with self.logger.timer("enumeration", category="compare"):
            if cfg.workers == 1:
                chunks = map(compare_chunk, tasks)
                for done, chunk in enumerate(chunks, 1):
                    counts = counts + chunk
                    self.logger.progress(done, len(tasks), category="compare")
            else:
                with ProcessPoolExecutor(max_workers=cfg.workers) as executor:
                    for done, chunk in enumerate(executor.map(compare_chunk, tasks), 1):
                        counts = counts + chunk
                        self.logger.progress(done, len(tasks), category="compare")
        counts.samples = counts.samples[: cfg.incomparable_samples]
        elapsed = time.perf_counter() - start
        for sample in counts.samples:
            self.logger.warning(
                f"incomparable: {sample.dividend!r} / {sample.divisor}: "
                f"fast={sample.fast!r} sdiv={sample.reference!r}"
            )
        return PrecisionReport(
            counts=counts,
            max_value=cfg.max_value,
            divisor_min=cfg.divisor_min,
            divisor_max=cfg.divisor_max,
            workers=cfg.workers,
            elapsed_seconds=elapsed,
        )


__all__ = [
    "Relation",
    "compare_pair",
    "IncomparablePair",
    "PrecisionCounts",
    "PrecisionReport",
    "ChunkTask",
    "iter_dividends",
    "compare_chunk",
    "PrecisionComparator",
]
