from __future__ import annotations

import pytest
from hypothesis import given

from pytnum.core.bits import MASK64
from pytnum.core.exceptions import FuelExhaustedError, InvariantViolation
from pytnum.core.tnum import BOTTOM, TOP, Tnum
from pytnum.ops.multiply import (
    decompose,
    mul,
    mul_opt,
    mul_rec,
    split_at_mu,
    xtnum_mul_high,
    xtnum_mul_high_top,
    xtnum_mul_top,
)
from pytnum.testing.strategies import tnum_and_member, tnums

SOUND_MULS = [mul, mul_opt, xtnum_mul_top, xtnum_mul_high_top]

operands = tnum_and_member(tnums(max_unknown_bits=6))


class TestExamples:
    @pytest.mark.parametrize("op", SOUND_MULS, ids=lambda op: op.__name__)
    def test_constants_multiply_exactly(self, op):
        assert op(Tnum.const_val(6), Tnum.const_val(7)) == Tnum.const_val(42)

    @pytest.mark.parametrize("op", SOUND_MULS, ids=lambda op: op.__name__)
    def test_top_and_bottom(self, op):
        assert op(TOP, Tnum.const_val(3)).is_top()
        assert op(BOTTOM, Tnum.const_val(3)).is_bottom()
        assert op(Tnum(2, 1), BOTTOM).is_bottom()

    def test_power_of_two_becomes_shift(self):
        assert mul_opt(Tnum.const_val(8), Tnum(1, 2)) == Tnum(8, 16)
        assert mul_opt(Tnum(1, 2), Tnum.const_val(8)) == Tnum(8, 16)

    def test_split_at_lowest_unknown_bit(self):
        x1, i, x2 = split_at_mu(Tnum(0b1010, 0b0100))
        assert (x1, i, x2) == (Tnum.const_val(1), 2, Tnum.const_val(2))

    def test_split_of_constant_is_a_defect(self):
        with pytest.raises(InvariantViolation):
            split_at_mu(Tnum.const_val(5))

    def test_decompose(self):
        assert decompose(Tnum(5, 2)) == (Tnum(2, 1), Tnum.const_val(1))

    def test_high_bit_first_runs_out_of_fuel(self):
        with pytest.raises(FuelExhaustedError):
            xtnum_mul_high(Tnum(0, 1), Tnum(0, 1), 0)

    def test_fuel_error_is_an_invariant_violation(self):
        with pytest.raises(AssertionError):
            xtnum_mul_high(Tnum(0, 3), Tnum(1, 2), 0)

    def test_split_multiply_is_exact_on_two_members(self):
        # {2, 3} * 5 = {10, 15}
        assert sorted(xtnum_mul_top(Tnum(2, 1), Tnum.const_val(5)).concretize()) == [10, 11, 14, 15]

    def test_recursive_multiply_drops_cross_terms(self):
        # 3 * 2 = 6 is missing from the result
        result = mul_rec(Tnum.const_val(3), Tnum(2, 1))
        assert 6 not in result


class TestSoundness:
    @pytest.mark.parametrize("op", SOUND_MULS, ids=lambda op: op.__name__)
    @given(lhs=operands, rhs=operands)
    def test_product_is_contained(self, op, lhs, rhs):
        (a, x), (b, y) = lhs, rhs
        r = op(a, b)
        assert r.is_bottom() or r.value & r.mask == 0
        assert (x * y) & MASK64 in r

    @given(lhs=tnum_and_member(), rhs=tnum_and_member())
    def test_bit_serial_on_wide_operands(self, lhs, rhs):
        (a, x), (b, y) = lhs, rhs
        assert (x * y) & MASK64 in mul(a, b)
