"""Word-level helpers for fixed-width unsigned arithmetic.
Python integers are unbounded, so every helper takes the word width
explicitly and masks its result back into ``[0, 2**width)``.
"""

from __future__ import annotations

WORD_BITS = 64
WIDE_BITS = 128
MASK64 = (1 << WORD_BITS) - 1
MASK128 = (1 << WIDE_BITS) - 1
SIGN_BIT = 1 << (WORD_BITS - 1)
I64_MAX = (1 << (WORD_BITS - 1)) - 1


def word_mask(width: int = WORD_BITS) -> int:
    """All-ones mask for a word of ``width`` bits."""
    return (1 << width) - 1


def to_signed(value: int, width: int = WORD_BITS) -> int:
    """Reinterpret an unsigned word as two's complement."""
    value &= (1 << width) - 1
    if value >> (width - 1):
        return value - (1 << width)
    return value


def to_unsigned(value: int, width: int = WORD_BITS) -> int:
    """Reinterpret a two's complement integer as an unsigned word."""
    return value & ((1 << width) - 1)


def leading_zeros(value: int, width: int = WORD_BITS) -> int:
    return width - (value & ((1 << width) - 1)).bit_length()


def trailing_zeros(value: int, width: int = WORD_BITS) -> int:
    value &= (1 << width) - 1
    if value == 0:
        return width
    return (value & -value).bit_length() - 1


def leading_ones(value: int, width: int = WORD_BITS) -> int:
    return leading_zeros(~value & ((1 << width) - 1), width)


def popcount(value: int) -> int:
    return bin(value).count("1")


def is_power_of_two(value: int) -> bool:
    return value != 0 and value & (value - 1) == 0


def bit_is_set(value: int, bit: int, width: int = WORD_BITS) -> bool:
    """Bit ``bit`` of ``value``; positions at or above ``width`` read as 0."""
    if bit >= width or bit < 0:
        return False
    return (value >> bit) & 1 == 1


def clear_low_bits(value: int, n: int, width: int = WORD_BITS) -> int:
    """Clear the ``n`` least significant bits."""
    if n >= width:
        return 0
    return value & (((1 << width) - 1) << n) & ((1 << width) - 1)


def clear_high_bits(value: int, n: int, width: int = WORD_BITS) -> int:
    """Clear the ``n`` most significant bits."""
    if n >= width:
        return 0
    return value & ((1 << (width - n)) - 1)


def ashr(value: int, shift: int, width: int = WORD_BITS) -> int:
    """Arithmetic right shift of an unsigned word."""
    return to_unsigned(to_signed(value, width) >> shift, width)


def sdiv_trunc(lhs: int, rhs: int, width: int = WORD_BITS) -> int:
    """Signed division truncating toward zero with wrapping overflow.
    Operands and result are unsigned words. ``MIN / -1`` wraps to ``MIN``.
    """
    a = to_signed(lhs, width)
    b = to_signed(rhs, width)
    q = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        q = -q
    return to_unsigned(q, width)


def srem_trunc(lhs: int, rhs: int, width: int = WORD_BITS) -> int:
    """Signed remainder with the sign of the dividend."""
    a = to_signed(lhs, width)
    b = to_signed(rhs, width)
    r = abs(a) % abs(b)
    if a < 0:
        r = -r
    return to_unsigned(r, width)


__all__ = [
    "WORD_BITS",
    "WIDE_BITS",
    "MASK64",
    "MASK128",
    "SIGN_BIT",
    "I64_MAX",
    "word_mask",
    "to_signed",
    "to_unsigned",
    "leading_zeros",
    "trailing_zeros",
    "leading_ones",
    "popcount",
    "is_power_of_two",
    "bit_is_set",
    "clear_low_bits",
    "clear_high_bits",
    "ashr",
    "sdiv_trunc",
    "srem_trunc",
]
