"""Division and remainder transfer functions.
A possibly-zero divisor never faults: the result is ``top``, which covers
every outcome. Signed division splits both operands into their
sign-homogeneous halves (the zero and one circles), divides each of the
four combinations and merges the results, since the magnitude reasoning of
``signed_div`` only holds within a single sign.

``fast_divide`` lifts the reciprocal-multiplication division of
``pytnum.ops.magic`` into the domain. The multiply step runs on 128-bit
``WideTnum`` values so the high half of the product keeps its carries.
"""

from __future__ import annotations

from pytnum.core import bits
from pytnum.core.bits import I64_MAX, MASK64, SIGN_BIT, WORD_BITS
from pytnum.core.tnum import BOTTOM, TOP, Tnum
from pytnum.core.wide import WideTnum
from pytnum.ops.bitwise import add, lshr_const, sub
from pytnum.ops.magic import (
    BitShiftDivider,
    Divider,
    FastDivider,
    GeneralDivider,
)

DEFAULT_DIVIDER_WIDTH = 64
NARROW_LIMIT = 0xFFFFFFFF


def udiv(a: Tnum, b: Tnum) -> Tnum:
    """Unsigned division.
    Only the leading zeros of the largest possible quotient are reported.
    """
    if a.is_bottom() or b.is_bottom():
        return BOTTOM
    if a.is_top() or b.is_top():
        return TOP
    if b.value == 0:
        return TOP
    max_quotient = ((a.value + a.mask) & MASK64) // b.value
    return TOP.clear_high_bits(bits.leading_zeros(max_quotient))


def get_zero_circle(t: Tnum) -> Tnum:
    """The members of ``t`` with the sign bit clear (bottom if none)."""
    if t.value & SIGN_BIT:
        return BOTTOM
    if t.mask & SIGN_BIT:
        return Tnum(t.value, t.mask & I64_MAX)
    return t


def get_one_circle(t: Tnum) -> Tnum:
    """The members of ``t`` with the sign bit set (bottom if none)."""
    if t.value & SIGN_BIT:
        return t
    if t.mask & SIGN_BIT:
        return Tnum(t.value | SIGN_BIT, t.mask & ~SIGN_BIT & MASK64)
    return BOTTOM


def _signed(word: int) -> int:
    return bits.to_signed(word)


def signed_div(a: Tnum, b: Tnum) -> Tnum:
    """Division of sign-homogeneous operands.
    The extremal quotient over the operands' signed bounds is computed
    exactly; the result keeps only the sign and the run of leading bits that
    every quotient shares with it.
    """
    if a.is_bottom() or b.is_bottom():
        return BOTTOM
    if a.is_singleton() and b.is_singleton():
        if b.value == 0:
            return TOP
        return Tnum.const_val(bits.sdiv_trunc(a.value, b.value))
    if a.is_nonnegative() and b.is_nonnegative():
        return udiv(a, b)

    quotient = 0
    if a.is_negative() and b.is_negative():
        if a.value == SIGN_BIT and b.is_singleton() and b.value == MASK64:
            return TOP
        denom = b.signed_max_value()
        num = a.signed_min_value()
        if num == SIGN_BIT and denom == MASK64:
            # MIN / -1 wraps to MIN while its neighbours stay positive
            return TOP
        quotient = _signed(bits.sdiv_trunc(num, denom))
    elif a.is_negative() and b.is_nonnegative():
        # negative iff -LHS >= RHS for every member
        neg_lhs_max = _signed(-a.signed_max_value())
        if neg_lhs_max >= _signed(b.signed_max_value()):
            denom = b.signed_min_value()
            num = a.signed_min_value()
            if denom != 0:
                quotient = _signed(bits.sdiv_trunc(num, denom))
    elif a.is_nonnegative() and b.is_negative():
        # negative iff LHS >= -RHS for every member
        neg_rhs_min = bits.to_unsigned(-b.signed_min_value())
        if a.signed_min_value() >= neg_rhs_min:
            denom = b.signed_max_value()
            num = a.signed_max_value()
            quotient = _signed(bits.sdiv_trunc(num, denom))

    result = TOP
    if quotient > 0:
        result = result.clear_high_bits(bits.leading_zeros(quotient))
    elif quotient < 0:
        lead_ones = bits.leading_ones(bits.to_unsigned(quotient))
        if lead_ones > 0:
            high = (MASK64 << (WORD_BITS - lead_ones)) & MASK64
            result = Tnum(result.value | high, result.mask & ~high & MASK64)
    return result


def sdiv(a: Tnum, b: Tnum) -> Tnum:
    """Signed division by case-splitting both operands on their sign bit."""
    if a.is_bottom() or b.is_bottom():
        return BOTTOM
    if a.is_top() or b.is_top():
        return TOP
    if b.value == 0:
        return TOP
    if a.is_singleton() and b.is_singleton():
        return Tnum.const_val(bits.sdiv_trunc(a.value, b.value))
    t0 = get_zero_circle(a)
    t1 = get_one_circle(a)
    x0 = get_zero_circle(b)
    x1 = get_one_circle(b)
    res00 = signed_div(t0, x0)
    res01 = signed_div(t0, x1)
    res10 = signed_div(t1, x0)
    res11 = signed_div(t1, x1)
    return res00.or_(res01).or_(res10).or_(res11)


def _fits_narrow(dividend: Tnum, divisor: int) -> bool:
    return dividend.max_value() <= NARROW_LIMIT and divisor <= NARROW_LIMIT


def lift_divider(dividend: Tnum, divider: Divider) -> Tnum:
    """Run a concrete divider strategy on an abstract dividend."""
    if isinstance(divider, BitShiftDivider):
        return lshr_const(dividend, divider.shift)
    wide = WideTnum.from_tnum(dividend)
    if isinstance(divider, FastDivider):
        product = wide.mul(WideTnum.const_val(divider.magic))
        return lshr_const(product.shifted_high(divider.width), divider.shift)
    if isinstance(divider, GeneralDivider):
        product = wide.mul(WideTnum.const_val(divider.magic_low))
        q = product.shifted_high(divider.width)
        t = add(lshr_const(sub(dividend, q), 1), q)
        return lshr_const(t, divider.shift)
    raise TypeError(f"unknown divider strategy {type(divider).__name__}")


def fast_divide(dividend: Tnum, divisor: Tnum, width: int = DEFAULT_DIVIDER_WIDTH) -> Tnum:
    """Unsigned division by a constant via reciprocal multiplication.
    ``width`` selects the 64-bit or the 32-bit divider constants. The 32-bit
    divider is only valid when every dividend member and the divisor fit in
    32 bits; other operands use the 64-bit divider. Non-constant divisors
    fall through to ``sdiv``.
    """
    if dividend.is_bottom() or divisor.is_bottom():
        return BOTTOM
    if not divisor.is_singleton():
        return sdiv(dividend, divisor)
    d = divisor.value
    if d == 0:
        return TOP
    if d == 1:
        return dividend
    if width == 32 and not _fits_narrow(dividend, d):
        width = DEFAULT_DIVIDER_WIDTH
    return lift_divider(dividend, Divider.divide_by(d, width))


def rem_get_low_bits(lhs: Tnum, rhs: Tnum) -> Tnum:
    """Low bits of a remainder by an even divisor.
    The remainder agrees with ``lhs`` below the divisor's trailing zeros;
    every other bit is unknown. A single trailing zero keeps no bits.
    """
    if not rhs.is_zero() and rhs.value & 1 == 0 and rhs.mask & 1 == 0:
        qzero = rhs.count_min_trailing_zeros()
        if qzero == 0:
            return TOP
        # TODO: qzero == 1 could keep bit 0 with a mask of 1
        low = (1 << qzero) - 1 if qzero > 1 else 0
        return Tnum(lhs.value & low, (lhs.mask & low) | (~low & MASK64))
    return TOP


def _is_exact_power_of_two(word: int) -> bool:
    return bits.trailing_zeros(word) + bits.leading_zeros(word) + 1 == WORD_BITS


def urem(a: Tnum, b: Tnum) -> Tnum:
    if a.is_bottom() or b.is_bottom():
        return BOTTOM
    if a.is_top() or b.is_top():
        return TOP
    if b.value == 0:
        return TOP
    result = rem_get_low_bits(a, b)
    if b.mask == 0 and not b.value & SIGN_BIT and _is_exact_power_of_two(b.value):
        low_bits = b.value - 1
        return Tnum(a.value & low_bits, a.mask & low_bits)
    # the remainder is at most either operand
    leading = max(a.count_min_leading_zeros(), b.count_min_leading_zeros())
    return result.clear_high_bits(leading)


def srem(a: Tnum, b: Tnum) -> Tnum:
    if a.is_bottom() or b.is_bottom():
        return BOTTOM
    if a.is_top() or b.is_top():
        return TOP
    if a.is_singleton() and b.is_singleton():
        if b.value == 0:
            return TOP
        return Tnum.const_val(bits.srem_trunc(a.value, b.value))
    if b.value == 0:
        return TOP
    result = rem_get_low_bits(a, b)
    if b.mask == 0 and b.value & 1 == 0 and _is_exact_power_of_two(b.value):
        low_bits = b.value - 1
        if a.is_nonnegative() or bits.trailing_zeros(b.value) <= a.count_min_trailing_zeros():
            result = Tnum(result.value & low_bits, result.mask & low_bits)
        return result
    leading = a.count_min_leading_zeros()
    return result.clear_high_bits(leading)


__all__ = [
    "DEFAULT_DIVIDER_WIDTH",
    "udiv",
    "signed_div",
    "sdiv",
    "get_zero_circle",
    "get_one_circle",
    "lift_divider",
    "fast_divide",
    "rem_get_low_bits",
    "urem",
    "srem",
]
