from __future__ import annotations

import pytest
import z3
from hypothesis import given
from hypothesis import strategies as st

from pytnum.core import bits
from pytnum.core.bits import MASK64, SIGN_BIT
from pytnum.core.exceptions import InvariantViolation
from pytnum.core.tnum import BOTTOM, TOP, Tnum
from pytnum.testing.strategies import (
    TnumLatticeMachine,
    lattice_elements,
    tnum_and_member,
    tnums,
)

TestLatticeMachine = TnumLatticeMachine.TestCase


class TestConstruction:
    def test_const_val(self):
        t = Tnum.const_val(5)
        assert t.value == 5
        assert t.mask == 0

    def test_from_range_single_point(self):
        assert Tnum.from_range(5, 5) == Tnum.const_val(5)

    def test_from_range_spans_differing_bits(self):
        assert Tnum.from_range(8, 11) == Tnum(8, 3)

    def test_from_range_empty_is_bottom(self):
        assert Tnum.from_range(5, 3).is_bottom()

    def test_from_range_full_word_is_top(self):
        assert Tnum.from_range(0, MASK64).is_top()

    def test_fields_must_be_words(self):
        with pytest.raises(ValueError):
            Tnum(-1, 0)
        with pytest.raises(ValueError):
            Tnum(0, 1 << 64)

    def test_overlapping_fields_are_bottom(self):
        assert Tnum(1, 1).is_bottom()
        assert BOTTOM.is_bottom()
        assert not TOP.is_bottom()

    @given(st.integers(min_value=0, max_value=MASK64), st.integers(min_value=0, max_value=MASK64))
    def test_from_range_contains_bounds(self, lo, hi):
        lo, hi = min(lo, hi), max(lo, hi)
        t = Tnum.from_range(lo, hi)
        assert lo in t
        assert hi in t
        assert (lo + hi) // 2 in t


class TestConcretization:
    def test_two_members(self):
        assert sorted(Tnum(2, 1).concretize()) == [2, 3]

    def test_ascending_order(self):
        assert list(Tnum(4, 3).concretize()) == [4, 5, 6, 7]
        assert list(Tnum(0, 0b101).concretize()) == [0, 1, 4, 5]

    def test_bottom_is_empty(self):
        assert list(BOTTOM.concretize()) == []

    def test_refuses_large_enumeration(self):
        with pytest.raises(ValueError):
            list(TOP.concretize())

    def test_membership(self):
        assert 3 in Tnum(2, 1)
        assert 4 not in Tnum(2, 1)
        assert 0 not in BOTTOM

    @given(tnum_and_member())
    def test_drawn_member_is_member(self, pair):
        t, w = pair
        assert t.member(w)

    @given(tnums(max_unknown_bits=6))
    def test_concretize_matches_membership(self, t):
        members = list(t.concretize())
        assert len(members) == 2 ** bits.popcount(t.mask)
        assert all(w in t for w in members)

    def test_z3_constraint(self):
        x = z3.BitVec("x", 64)
        t = Tnum(2, 1)
        solver = z3.Solver()
        solver.add(t.to_z3_constraint(x), x == 3)
        assert solver.check() == z3.sat
        solver = z3.Solver()
        solver.add(t.to_z3_constraint(x), x == 4)
        assert solver.check() == z3.unsat

    def test_z3_constraint_of_bottom_is_false(self):
        x = z3.BitVec("x", 64)
        solver = z3.Solver()
        solver.add(BOTTOM.to_z3_constraint(x))
        assert solver.check() == z3.unsat


class TestOrder:
    def test_top_and_bottom(self):
        t = Tnum(2, 1)
        assert t.le(TOP)
        assert BOTTOM.le(t)
        assert not TOP.le(t)
        assert not t.le(BOTTOM)

    def test_singleton_below_its_cover(self):
        assert Tnum.const_val(3).le(Tnum(2, 1))
        assert not Tnum(2, 1).le(Tnum.const_val(3))
        assert Tnum(2, 1).contains(Tnum.const_val(3))

    def test_all_bottoms_are_equal(self):
        assert Tnum(1, 1).eq(BOTTOM)

    @given(lattice_elements())
    def test_reflexive(self, a):
        assert a.le(a)

    @given(tnums(max_unknown_bits=4), tnums(max_unknown_bits=4))
    def test_antisymmetric(self, a, b):
        if a.le(b) and b.le(a):
            assert a == b

    @given(lattice_elements(), lattice_elements(), lattice_elements())
    def test_transitive(self, a, b, c):
        if a.le(b) and b.le(c):
            assert a.le(c)

    @given(tnums(max_unknown_bits=5), tnums(max_unknown_bits=5))
    def test_le_is_set_inclusion(self, a, b):
        subset = all(w in b for w in a.concretize())
        assert a.le(b) == subset


class TestJoinMeet:
    def test_join_of_constants(self):
        assert Tnum.const_val(2).join(Tnum.const_val(3)) == Tnum(2, 1)

    def test_join_with_bottom_is_identity(self):
        t = Tnum(8, 3)
        assert t.join(BOTTOM) == t
        assert BOTTOM.join(t) == t

    @given(lattice_elements(), lattice_elements())
    def test_join_commutative(self, a, b):
        assert a.join(b).eq(b.join(a))

    @given(lattice_elements(), lattice_elements(), lattice_elements())
    def test_join_associative(self, a, b, c):
        assert a.join(b).join(c).eq(a.join(b.join(c)))

    @given(lattice_elements())
    def test_join_idempotent(self, a):
        assert a.join(a).eq(a)

    @given(lattice_elements(), lattice_elements())
    def test_join_upper_bound(self, a, b):
        j = a.join(b)
        assert a.le(j)
        assert b.le(j)

    @given(tnum_and_member(), tnums())
    def test_join_keeps_members(self, pair, other):
        t, w = pair
        assert w in t.join(other)
        assert w in other.join(t)

    def test_meet_of_overlapping(self):
        assert Tnum(0b10, 0b01).meet(Tnum(0b00, 0b10)) == Tnum.const_val(2)

    def test_meet_of_disjoint_is_bottom(self):
        assert Tnum.const_val(1).meet(Tnum.const_val(2)).is_bottom()

    @given(tnums(max_unknown_bits=5), tnums(max_unknown_bits=5))
    def test_meet_is_intersection(self, a, b):
        m = a.meet(b)
        common = [w for w in a.concretize() if w in b]
        assert sorted(m.concretize()) == common

    def test_or_of_constants(self):
        assert Tnum.const_val(2).or_(Tnum.const_val(3)) == Tnum(2, 1)

    def test_or_returns_larger_operand(self):
        assert Tnum(2, 1).or_(Tnum.const_val(3)) == Tnum(2, 1)
        assert BOTTOM.or_(Tnum(2, 1)) == Tnum(2, 1)

    @given(lattice_elements(), lattice_elements())
    def test_or_upper_bound(self, a, b):
        o = a.or_(b)
        assert a.le(o)
        assert b.le(o)

    def test_intersect(self):
        assert Tnum(2, 1).intersect(Tnum(0, 3)) == Tnum(2, 1)


class TestHelpers:
    def test_counts(self):
        t = Tnum(0b1000, 0b0110)
        assert t.max_value() == 14
        assert t.count_min_trailing_zeros() == 1
        assert t.count_min_leading_zeros() == 60
        assert t.count_max_trailing_zeros() == 3

    def test_min_trailing_zeros_reads_the_union_of_fields(self):
        # value + mask would carry into bit 3 here
        assert Tnum(0b100, 0b100).count_min_trailing_zeros() == 2

    @given(tnum_and_member(tnums(max_unknown_bits=6)))
    def test_min_trailing_zeros_is_a_lower_bound(self, pair):
        t, x = pair
        fewest = t.count_min_trailing_zeros()
        assert bits.trailing_zeros(x) >= fewest
        assert bits.trailing_zeros(t.max_value()) == fewest

    def test_signed_bounds_of_negative(self):
        t = Tnum(SIGN_BIT, 1)
        assert t.signed_min_value() == SIGN_BIT
        assert t.signed_max_value() == SIGN_BIT + 1

    def test_signed_bounds_with_unknown_sign(self):
        t = Tnum(0, SIGN_BIT | 1)
        assert t.signed_min_value() == SIGN_BIT
        assert t.signed_max_value() == 1

    @given(tnums(max_unknown_bits=6))
    def test_signed_bounds_are_tight(self, t):
        signed = [bits.to_signed(w) for w in t.concretize()]
        assert bits.to_signed(t.signed_min_value()) == min(signed)
        assert bits.to_signed(t.signed_max_value()) == max(signed)

    def test_sign_predicates(self):
        assert Tnum(1, 2).is_nonnegative()
        assert Tnum(SIGN_BIT, 1).is_negative()
        assert not Tnum(0, SIGN_BIT).is_negative()
        assert not Tnum(0, SIGN_BIT).is_nonnegative()

    def test_clear_high_bits(self):
        assert TOP.clear_high_bits(60) == Tnum(0, 0xF)

    def test_cast(self):
        assert Tnum(0x1FF, 0x100).cast(1) == Tnum.const_val(0xFF)
        assert Tnum(0x1FF, 0x100).cast(8) == Tnum(0x1FF, 0x100)

    def test_is_aligned(self):
        assert Tnum(8, 0x10).is_aligned(8)
        assert not Tnum(8, 1).is_aligned(2)

    def test_subregisters(self):
        t = Tnum(0x1_0000_0005, 0x2_0000_0000)
        assert t.subreg() == Tnum.const_val(5)
        assert t.clear_subreg() == Tnum(0x1_0000_0000, 0x2_0000_0000)
        assert t.with_subreg(Tnum(3, 4)) == Tnum(0x1_0000_0003, 0x2_0000_0004)
        assert t.with_const_subreg(7) == Tnum(0x1_0000_0007, 0x2_0000_0000)

    def test_to_sbin(self):
        assert Tnum(2, 1).to_sbin() == "0" * 62 + "1x"
        assert Tnum(SIGN_BIT, 0).to_sbin(5) == "1000"
        assert str(BOTTOM) == "⊥"

    def test_to_sbin_rejects_empty_buffer(self):
        with pytest.raises(InvariantViolation):
            Tnum(2, 1).to_sbin(0)
        with pytest.raises(AssertionError):
            Tnum(2, 1).to_sbin(-3)
