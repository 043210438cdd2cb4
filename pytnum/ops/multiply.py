"""Multiplication transfer functions.
Four algorithms of increasing precision and cost:
- mul: bit-serial accumulation of the uncertain partial products
- mul_opt: power-of-two fast path in front of ``mul``
- xtnum_mul_top: splits an operand at its lowest unknown bit and joins the
  two completions of that bit, recursing on the remaining unknown bits
- xtnum_mul_high_top: consumes set bits from the most significant end,
  bounded by a fuel parameter

``mul_rec`` is a known-incomplete experiment kept for comparison only: it
recurses on the high halves of both operands and drops the low cross terms,
so its result does not over-approximate the product in general.
"""

from __future__ import annotations

from pytnum.core import bits
from pytnum.core.bits import MASK64, WORD_BITS
from pytnum.core.exceptions import FuelExhaustedError, InvariantViolation
from pytnum.core.tnum import BOTTOM, TOP, Tnum
from pytnum.ops.bitwise import add, lshr_const, shl_const

ZERO = Tnum.const_val(0)
ONE = Tnum.const_val(1)


def _shift_left(t: Tnum, k: int) -> Tnum:
    """Left shift where amounts of a full word or more clear every bit."""
    if k >= WORD_BITS:
        return ZERO
    return shl_const(t, k)


def mul(a: Tnum, b: Tnum) -> Tnum:
    if a.is_bottom() or b.is_bottom():
        return BOTTOM
    if a.is_top() or b.is_top():
        return TOP
    acc_v = (a.value * b.value) & MASK64
    acc_m = ZERO
    while a.value or a.mask:
        if a.value & 1:
            acc_m = add(acc_m, Tnum(0, b.mask))
        elif a.mask & 1:
            acc_m = add(acc_m, Tnum(0, b.value | b.mask))
        a = lshr_const(a, 1)
        b = shl_const(b, 1)
    return add(Tnum.const_val(acc_v), acc_m)


def mul_opt(a: Tnum, b: Tnum) -> Tnum:
    """``mul`` with a shift fast path for power-of-two constants.
    Otherwise the operand with fewer possibly-set bits drives the loop.
    """
    if a.is_singleton() and bits.is_power_of_two(a.value):
        return shl_const(b, bits.trailing_zeros(a.value))
    if b.is_singleton() and bits.is_power_of_two(b.value):
        return shl_const(a, bits.trailing_zeros(b.value))
    if bits.popcount(a.value | a.mask) <= bits.popcount(b.value | b.mask):
        return mul(a, b)
    return mul(b, a)


def split_at_mu(x: Tnum) -> tuple[Tnum, int, Tnum]:
    """Split ``x`` at its lowest unknown bit ``i``.
    Returns ``(x1, i, x2)`` with ``x = (x1 << (i + 1)) + (mu << i) + x2``,
    where ``mu`` is the unknown bit and ``x2`` holds the known bits below it.
    """
    if x.mask == 0:
        raise InvariantViolation("split_at_mu", "operand has no unknown bit", x=x)
    i = bits.trailing_zeros(x.mask)
    low = (1 << i) - 1
    x1 = Tnum(x.value >> (i + 1), x.mask >> (i + 1))
    x2 = Tnum(x.value & low, x.mask & low)
    return x1, i, x2


def mul_const(x: Tnum, c: int, n: int) -> Tnum:
    """Multiply ``x``, which has ``n`` unknown bits, by the word ``c``."""
    if n == 0:
        return Tnum.const_val(c * x.value)
    x1, i, x2 = split_at_mu(x)
    p = mul_const(x1, c, n - 1)
    mc = Tnum.const_val(c * x2.value)
    mu0 = add(_shift_left(p, i + 1), mc)
    mu1 = add(mu0, Tnum.const_val(c << i))
    return mu0.join(mu1)


def xtnum_mul(x: Tnum, i: int, y: Tnum, j: int) -> Tnum:
    """Multiply ``x`` (``i`` unknown bits) by ``y`` (``j`` unknown bits), ``i <= j``."""
    if i == 0 and j == 0:
        return Tnum.const_val(x.value * y.value)
    y1, i1, y2 = split_at_mu(y)
    if i == j:
        p = xtnum_mul(y1, j - 1, x, i)
    else:
        p = xtnum_mul(x, i, y1, j - 1)
    mc = mul_const(x, y2.value, i)
    mu0 = add(_shift_left(p, i1 + 1), mc)
    mu1 = add(mu0, _shift_left(x, i1))
    return mu0.join(mu1)


def xtnum_mul_top(a: Tnum, b: Tnum) -> Tnum:
    if a.is_bottom() or b.is_bottom():
        return BOTTOM
    if a.is_top() or b.is_top():
        return TOP
    i = bits.popcount(a.mask)
    j = bits.popcount(b.mask)
    if i <= j:
        return xtnum_mul(a, i, b, j)
    return xtnum_mul(b, j, a, i)


def xtnum_mul_high(x: Tnum, y: Tnum, n: int) -> Tnum:
    """Multiply by peeling the most significant possibly-set bit of ``y``.
    ``n`` is the fuel, initially the number of possibly-set bits of both
    operands; every step consumes one such bit.
    """
    if x.mask == 0 and y.mask == 0:
        return Tnum.const_val(x.value * y.value)
    if n == 0:
        raise FuelExhaustedError("xtnum_mul_high", x=x, y=y)
    b = y.bit_size()
    if b == 0:
        return ZERO
    unknown_top = bits.bit_is_set(y.mask, b - 1)
    y_prime = y.clear_bit(b - 1)
    if y_prime.max_value() <= x.max_value():
        p = xtnum_mul_high(y_prime, x, n - 1)
    else:
        p = xtnum_mul_high(x, y_prime, n - 1)
    with_bit = add(p, shl_const(x, b - 1))
    if unknown_top:
        return with_bit.join(p)
    return with_bit


def xtnum_mul_high_top(a: Tnum, b: Tnum) -> Tnum:
    if a.is_bottom() or b.is_bottom():
        return BOTTOM
    if a.is_top() or b.is_top():
        return TOP
    fuel = bits.popcount(a.value | a.mask) + bits.popcount(b.value | b.mask)
    return xtnum_mul_high(a, b, fuel)


def decompose(t: Tnum) -> tuple[Tnum, Tnum]:
    """Split into the upper 63 bits and the lowest bit."""
    return Tnum(t.value >> 1, t.mask >> 1), Tnum(t.value & 1, t.mask & 1)


def mul_rec(a: Tnum, b: Tnum) -> Tnum:
    """Recursive multiply that only folds the high halves.
    Known to be wrong: the terms a_up*b_low, a_low*b_up and a_low*b_low are
    dropped. Do not use as a transfer function.
    """
    if a.mask == 0 and b.mask == 0:
        return Tnum.const_val(a.value * b.value)
    if a.mask == MASK64 and b.mask == MASK64:
        return TOP
    if a.is_zero() or b.is_zero():
        return ZERO
    if a == ONE:
        return b
    if b == ONE:
        return a
    a_up, _ = decompose(a)
    b_up, _ = decompose(b)
    # TODO: add the a_up*b_low, a_low*b_up and a_low*b_low cross terms
    return mul_rec(a_up, b_up)


__all__ = [
    "mul",
    "mul_opt",
    "split_at_mu",
    "mul_const",
    "xtnum_mul",
    "xtnum_mul_top",
    "xtnum_mul_high",
    "xtnum_mul_high_top",
    "decompose",
    "mul_rec",
]
