"""Analysis drivers for pytnum.
Provides:
- PrecisionComparator: exhaustive fast_divide vs sdiv precision comparison
- SoundnessRefuter: Z3 search for fast_divide soundness counterexamples
"""

from pytnum.analysis.precision import (
    PrecisionComparator,
    PrecisionCounts,
    PrecisionReport,
    Relation,
    compare_pair,
)
from pytnum.analysis.refuter import (
    Counterexample,
    RefutationResult,
    SoundnessRefuter,
)

__all__ = [
    "PrecisionComparator",
    "PrecisionCounts",
    "PrecisionReport",
    "Relation",
    "compare_pair",
    "Counterexample",
    "RefutationResult",
    "SoundnessRefuter",
]
