"""Core module for pytnum.
Provides:
- Word-level helpers for 64/128-bit unsigned arithmetic
- The Tnum value type and its lattice operations
- WideTnum scratch values for carry-exact multiplication
- The Z3 solver session interface
- Error types and the arithmetic trace hook
"""

from pytnum.core.exceptions import (
    ConfigError,
    FuelExhaustedError,
    InvariantViolation,
    TnumError,
)
from pytnum.core.solver import SolverResult, SolverSession, Verdict
from pytnum.core.tnum import BOTTOM, TOP, Tnum
from pytnum.core.trace import emit, set_trace_hook, tracing
from pytnum.core.wide import WideTnum

__all__ = [
    "Tnum",
    "TOP",
    "BOTTOM",
    "WideTnum",
    "SolverSession",
    "SolverResult",
    "Verdict",
    "TnumError",
    "InvariantViolation",
    "FuelExhaustedError",
    "ConfigError",
    "emit",
    "set_trace_hook",
    "tracing",
]
