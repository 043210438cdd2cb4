"""Additive, bitwise and shift transfer functions.
Addition and subtraction use the carry-propagation abstraction: the sums of
the minimal and maximal members differ exactly in the bits a carry may have
reached, and those bits become unknown.

Shift amounts follow the verifier's masking convention: a constant amount is
taken modulo 64, and a variable amount is reduced to its low six bits before
the candidate amounts are examined.
"""

from __future__ import annotations

from pytnum.core import bits
from pytnum.core.bits import MASK64, SIGN_BIT, WORD_BITS
from pytnum.core.tnum import BOTTOM, TOP, Tnum
from pytnum.core.trace import emit

# Joins attempted by a variable shift before giving up on precision.
MAX_SHIFT_JOINS = 8


def add(a: Tnum, b: Tnum) -> Tnum:
    if a.is_bottom() or b.is_bottom():
        return BOTTOM
    sm = (a.mask + b.mask) & MASK64
    sv = (a.value + b.value) & MASK64
    sigma = (sm + sv) & MASK64
    chi = sigma ^ sv
    mu = chi | a.mask | b.mask
    return Tnum(sv & ~mu & MASK64, mu)


def sub(a: Tnum, b: Tnum) -> Tnum:
    if a.is_bottom() or b.is_bottom():
        return BOTTOM
    if a.is_top() or b.is_top():
        return TOP
    dv = (a.value - b.value) & MASK64
    alpha = (dv + a.mask) & MASK64
    beta = (dv - b.mask) & MASK64
    chi = alpha ^ beta
    mu = chi | a.mask | b.mask
    return Tnum(dv & ~mu & MASK64, mu)


def xor(a: Tnum, b: Tnum) -> Tnum:
    if a.is_bottom() or b.is_bottom():
        return BOTTOM
    if a.is_top() or b.is_top():
        return TOP
    v = a.value ^ b.value
    mu = a.mask | b.mask
    return Tnum(v & ~mu & MASK64, mu)


def not_(a: Tnum) -> Tnum:
    """Bitwise complement: flips the known bits only."""
    if a.is_bottom():
        return BOTTOM
    if a.is_top():
        return TOP
    return Tnum(~(a.value ^ a.mask) & MASK64, a.mask)


def bit_and(a: Tnum, b: Tnum) -> Tnum:
    if a.is_bottom() or b.is_bottom():
        return BOTTOM
    alpha = a.value | a.mask
    beta = b.value | b.mask
    v = a.value & b.value
    return Tnum(v, alpha & beta & ~v & MASK64)


def bit_or(a: Tnum, b: Tnum) -> Tnum:
    if a.is_bottom() or b.is_bottom():
        return BOTTOM
    v = a.value | b.value
    mu = a.mask | b.mask
    return Tnum(v, mu & ~v & MASK64)


def shl_const(a: Tnum, k: int) -> Tnum:
    if a.is_bottom():
        return a
    shift = k % WORD_BITS
    return Tnum((a.value << shift) & MASK64, (a.mask << shift) & MASK64)


def lshr_const(a: Tnum, k: int) -> Tnum:
    if a.is_bottom():
        return a
    shift = k % WORD_BITS
    return Tnum(a.value >> shift, a.mask >> shift)


def ashr_const(a: Tnum, k: int) -> Tnum:
    """Arithmetic right shift by a constant.
    The sign fill depends on which of ``value``/``mask`` carries the sign bit:
    a known sign fills with that bit, an unknown sign fills with unknowns.
    """
    if a.is_bottom():
        return a
    shift = k % WORD_BITS
    value_sign = a.value & SIGN_BIT != 0
    mask_sign = a.mask & SIGN_BIT != 0
    if not value_sign and not mask_sign:
        return Tnum(a.value >> shift, a.mask >> shift)
    if value_sign and not mask_sign:
        return Tnum(bits.ashr(a.value, shift), a.mask >> shift)
    return Tnum(a.value >> shift, bits.ashr(a.mask, shift))


def _shift_amounts(amount: Tnum) -> Tnum:
    """Reduce a shift-amount tnum to the amounts modulo the word width."""
    low = WORD_BITS - 1
    return Tnum(amount.value & low, amount.mask & low)


def shl(a: Tnum, amount: Tnum) -> Tnum:
    """Left shift by a tnum amount."""
    if a.is_bottom() or amount.is_bottom():
        return BOTTOM
    if a.is_top() or amount.is_top():
        return TOP
    amounts = _shift_amounts(amount)
    if amounts.is_singleton():
        return shl_const(a, amounts.value)
    min_shift = amounts.value
    max_shift = amounts.max_value()
    if min_shift == 0 and max_shift == WORD_BITS - 1:
        # every amount is possible: only the operand's trailing zeros survive
        trailing = a.count_min_trailing_zeros()
        emit("shl.fast_path", operand=a, amount=amount, trailing_zeros=trailing)
        return Tnum(0, bits.clear_low_bits(MASK64, trailing))
    result = BOTTOM
    joins = 0
    for shift in range(min_shift, max_shift + 1):
        if not amounts.member(shift):
            continue
        joins += 1
        result = result.or_(shl_const(a, shift))
        if joins > MAX_SHIFT_JOINS or result.is_top():
            return TOP
    return result


def lshr(a: Tnum, amount: Tnum) -> Tnum:
    """Logical right shift by a tnum amount."""
    if a.is_bottom() or amount.is_bottom():
        return BOTTOM
    if a.is_top() or amount.is_top():
        return TOP
    amounts = _shift_amounts(amount)
    if amounts.is_singleton():
        return lshr_const(a, amounts.value)
    min_shift = amounts.value
    max_shift = amounts.max_value()
    leading = bits.leading_zeros(a.max_value())
    if leading + min_shift >= WORD_BITS:
        return Tnum.const_val(0)
    bound = TOP.clear_high_bits(leading + min_shift)
    if min_shift == 0 and max_shift == WORD_BITS - 1:
        emit("lshr.fast_path", operand=a, amount=amount, leading_zeros=leading)
        return bound
    result = BOTTOM
    joins = 0
    for shift in range(min_shift, max_shift + 1):
        if not amounts.member(shift):
            continue
        joins += 1
        result = result.or_(lshr_const(a, shift))
        if joins > MAX_SHIFT_JOINS or result.is_top():
            return bound
    return result


__all__ = [
    "MAX_SHIFT_JOINS",
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
]
