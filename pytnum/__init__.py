"""pytnum: tristate numbers for BPF-style static analysis.
A tnum abstracts a set of 64-bit words by tracking, per bit, whether it is
known 0, known 1 or unknown. pytnum provides:
- The Tnum lattice and its transfer functions (add, sub, bitwise, shifts)
- Several multiplication algorithms
- Division and remainder, including reciprocal-constant fast division
- An exhaustive precision comparator for fast_divide against sdiv
- A Z3-backed soundness refuter for fast_divide
Example:
    >>> from pytnum import Tnum, fast_divide
    >>> q = fast_divide(Tnum(value=12, mask=3), Tnum.const_val(4))
    >>> sorted(q.concretize())
    [3]
"""

from pytnum.core.exceptions import (
    ConfigError,
    FuelExhaustedError,
    InvariantViolation,
    TnumError,
)
from pytnum.core.solver import SolverResult, SolverSession, Verdict
from pytnum.core.tnum import BOTTOM, TOP, Tnum
from pytnum.ops import (
    add,
    ashr_const,
    bit_and,
    bit_or,
    fast_divide,
    lshr,
    lshr_const,
    mul,
    mul_opt,
    not_,
    sdiv,
    shl,
    shl_const,
    srem,
    sub,
    udiv,
    urem,
    xor,
    xtnum_mul_high_top,
    xtnum_mul_top,
)
from pytnum.config import PyTnumConfig, load_config
from pytnum.logging import LogLevel, configure_logging, get_logger

__version__ = "0.1.0"

__all__ = [
    "Tnum",
    "TOP",
    "BOTTOM",
    "add",
    "sub",
    "xor",
    "not_",
    "bit_and",
    "bit_or",
    "shl_const",
    "lshr_const",
    "ashr_const",
    "shl",
    "lshr",
    "mul",
    "mul_opt",
    "xtnum_mul_top",
    "xtnum_mul_high_top",
    "udiv",
    "sdiv",
    "urem",
    "srem",
    "fast_divide",
    "SolverSession",
    "SolverResult",
    "Verdict",
    "TnumError",
    "InvariantViolation",
    "FuelExhaustedError",
    "ConfigError",
    "PyTnumConfig",
    "load_config",
    "configure_logging",
    "get_logger",
    "LogLevel",
]
