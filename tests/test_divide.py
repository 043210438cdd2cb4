from __future__ import annotations

import pytest
from hypothesis import assume, given
from hypothesis import strategies as st

from pytnum.core import bits
from pytnum.core.bits import MASK64, SIGN_BIT
from pytnum.core.tnum import BOTTOM, TOP, Tnum
from pytnum.ops.divide import (
    fast_divide,
    get_one_circle,
    get_zero_circle,
    rem_get_low_bits,
    sdiv,
    srem,
    udiv,
    urem,
)
from pytnum.testing.strategies import nonnegative_tnums, tnum_and_member, tnums, words

operands = tnum_and_member(tnums(max_unknown_bits=6))
divisors = words().filter(lambda d: d != 0)


def well_formed(t: Tnum) -> bool:
    return t.is_bottom() or t.value & t.mask == 0


class TestScenarios:
    def test_fast_divide_of_constants(self):
        fast = fast_divide(Tnum.const_val(6), Tnum.const_val(3))
        reference = sdiv(Tnum.const_val(6), Tnum.const_val(3))
        assert fast.le(reference)
        assert 2 in fast
        assert 2 in reference

    def test_fast_divide_of_top_by_four(self):
        assert fast_divide(TOP, Tnum.const_val(4)) == Tnum(0, MASK64 >> 2)

    @given(words())
    def test_fast_divide_of_top_covers_every_quotient(self, w):
        assert w // 4 in fast_divide(TOP, Tnum.const_val(4))

    def test_urem_by_power_of_two_masks(self):
        assert urem(Tnum(0, 0xF), Tnum.const_val(4)) == Tnum(0, 3)


class TestFastDivide:
    def test_division_by_zero_is_top(self):
        assert fast_divide(Tnum(4, 3), Tnum.const_val(0)).is_top()

    def test_division_by_one_is_identity(self):
        t = Tnum(8, 0x13)
        assert fast_divide(t, Tnum.const_val(1)) is t

    def test_bottom(self):
        assert fast_divide(BOTTOM, Tnum.const_val(3)).is_bottom()
        assert fast_divide(Tnum.const_val(3), BOTTOM).is_bottom()

    def test_unknown_divisor_falls_back_to_sdiv(self):
        a, b = Tnum(100, 0x3), Tnum(2, 1)
        assert fast_divide(a, b) == sdiv(a, b)

    @pytest.mark.parametrize("width", [32, 64])
    @given(n=words(), d=divisors)
    def test_constants_divide_exactly(self, width, n, d):
        assert fast_divide(Tnum.const_val(n), Tnum.const_val(d), width) == Tnum.const_val(n // d)

    @given(
        n=st.integers(min_value=0, max_value=0xFFFFFFFF),
        d=st.integers(min_value=1, max_value=0xFFFFFFFF),
    )
    def test_narrow_and_wide_dividers_agree(self, n, d):
        narrow = fast_divide(Tnum.const_val(n), Tnum.const_val(d), 32)
        wide = fast_divide(Tnum.const_val(n), Tnum.const_val(d), 64)
        assert narrow == wide

    @pytest.mark.parametrize("width", [32, 64])
    @given(pair=operands, d=divisors)
    def test_soundness(self, width, pair, d):
        a, n = pair
        r = fast_divide(a, Tnum.const_val(d), width)
        assert well_formed(r)
        assert n // d in r

    @given(pair=tnum_and_member(tnums(max_unknown_bits=6, width=32)), d=divisors)
    def test_soundness_on_narrow_dividends(self, pair, d):
        a, n = pair
        assert n // d in fast_divide(a, Tnum.const_val(d), 32)


class TestUnsigned:
    def test_udiv_bounds_quotient(self):
        assert udiv(Tnum(8, 3), Tnum.const_val(2)) == Tnum(0, 7)

    def test_udiv_by_possible_zero(self):
        assert udiv(Tnum.const_val(9), Tnum(0, 2)).is_top()

    def test_urem_keeps_low_bits_and_bounds(self):
        r = urem(Tnum.const_val(100), Tnum.const_val(12))
        assert r == Tnum(0, 0xC)
        assert 100 % 12 in r

    @given(operands, operands)
    def test_udiv_soundness(self, lhs, rhs):
        (a, x), (b, y) = lhs, rhs
        assume(y != 0)
        r = udiv(a, b)
        assert well_formed(r)
        assert x // y in r

    @given(operands, operands)
    def test_urem_soundness(self, lhs, rhs):
        (a, x), (b, y) = lhs, rhs
        assume(y != 0)
        r = urem(a, b)
        assert well_formed(r)
        assert x % y in r


class TestSigned:
    def test_circles(self):
        t = Tnum(0, SIGN_BIT | 1)
        assert get_zero_circle(t) == Tnum(0, 1)
        assert get_one_circle(t) == Tnum(SIGN_BIT, 1)

    def test_empty_circles_are_bottom(self):
        assert get_zero_circle(Tnum.const_val(SIGN_BIT)).is_bottom()
        assert get_one_circle(Tnum.const_val(5)).is_bottom()

    def test_constant_division_truncates(self):
        r = sdiv(Tnum.const_val(bits.to_unsigned(-7)), Tnum.const_val(2))
        assert r == Tnum.const_val(bits.to_unsigned(-3))

    def test_min_by_minus_one_is_top(self):
        assert sdiv(Tnum(SIGN_BIT, 1), Tnum.const_val(MASK64)).is_top()

    def test_sdiv_absorbs_bottom(self):
        assert sdiv(BOTTOM, Tnum(2, 1)).is_bottom()
        assert srem(Tnum(2, 1), BOTTOM).is_bottom()

    def test_srem_by_power_of_two(self):
        assert srem(Tnum(0, 0xF), Tnum.const_val(4)) == Tnum(0, 3)

    @given(operands, operands)
    def test_sdiv_soundness(self, lhs, rhs):
        (a, x), (b, y) = lhs, rhs
        assume(y != 0)
        r = sdiv(a, b)
        assert well_formed(r)
        assert bits.sdiv_trunc(x, y) in r

    @given(nonnegative_tnums(), nonnegative_tnums())
    def test_nonnegative_operands_refine_udiv(self, a, b):
        assume(b.value != 0)
        assert sdiv(a, b).le(udiv(a, b))

    @given(operands, operands)
    def test_srem_soundness(self, lhs, rhs):
        (a, x), (b, y) = lhs, rhs
        assume(y != 0)
        r = srem(a, b)
        assert well_formed(r)
        assert bits.srem_trunc(x, y) in r


class TestRemainderLowBits:
    def test_single_trailing_zero_keeps_nothing(self):
        assert rem_get_low_bits(Tnum.const_val(5), Tnum.const_val(6)).is_top()

    def test_low_bits_follow_dividend(self):
        r = rem_get_low_bits(Tnum.const_val(13), Tnum.const_val(12))
        assert r == Tnum(1, MASK64 & ~3)

    def test_odd_divisor_is_top(self):
        assert rem_get_low_bits(Tnum.const_val(13), Tnum.const_val(7)).is_top()
