"""Transfer functions over tnums.
Provides:
- Carry-aware addition/subtraction, bitwise operators and shifts
- Multiplication algorithms (bit-serial, split-recursive, high-bit-first)
- Division and remainder, including reciprocal-constant fast division
"""

from pytnum.ops.bitwise import (
    add,
    ashr_const,
    bit_and,
    bit_or,
    lshr,
    lshr_const,
    not_,
    shl,
    shl_const,
    sub,
    xor,
)
from pytnum.ops.divide import (
    fast_divide,
    get_one_circle,
    get_zero_circle,
    rem_get_low_bits,
    sdiv,
    signed_div,
    srem,
    udiv,
    urem,
)
from pytnum.ops.magic import (
    BitShiftDivider,
    Divider,
    FastDivider,
    GeneralDivider,
)
from pytnum.ops.multiply import (
    mul,
    mul_opt,
    mul_rec,
    xtnum_mul_high_top,
    xtnum_mul_top,
)

__all__ = [
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
    "mul_rec",
    "xtnum_mul_top",
    "xtnum_mul_high_top",
    "udiv",
    "sdiv",
    "signed_div",
    "get_zero_circle",
    "get_one_circle",
    "urem",
    "srem",
    "rem_get_low_bits",
    "fast_divide",
    "Divider",
    "FastDivider",
    "BitShiftDivider",
    "GeneralDivider",
]
