"""Tristate numbers over 64-bit words.
A tnum tracks, for every bit of a machine word, whether the bit is known to
be 0, known to be 1, or unknown:
- bit i of ``mask`` set: bit i is unknown
- bit i of ``mask`` clear: bit i equals bit i of ``value``
A concrete word ``w`` belongs to ``t`` iff ``(w ^ t.value) & ~t.mask == 0``.
Tnums form a lattice ordered by set inclusion of their concretizations:
- top (⊤): value = 0, mask = all ones, every word
- bottom (⊥): value = mask = all ones, no word
Any tnum with ``value & mask != 0`` is treated as bottom.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

import z3

from pytnum.core import bits
from pytnum.core.bits import MASK64, SIGN_BIT, WORD_BITS
from pytnum.core.exceptions import InvariantViolation


@dataclass(frozen=True)
class Tnum:
    """Immutable tristate number (``value``, ``mask``)."""

    value: int
    mask: int

    def __post_init__(self):
        if not 0 <= self.value <= MASK64 or not 0 <= self.mask <= MASK64:
            raise ValueError(
                "tnum fields must be 64-bit unsigned words: "
                f"value={self.value:#x}, mask={self.mask:#x}"
            )

    @classmethod
    def top(cls) -> Tnum:
        return cls(0, MASK64)

    @classmethod
    def bottom(cls) -> Tnum:
        return cls(MASK64, MASK64)

    @classmethod
    def const_val(cls, value: int) -> Tnum:
        """Singleton tnum for the word ``value`` (wrapped to 64 bits)."""
        return cls(value & MASK64, 0)

    @classmethod
    def from_concrete(cls, value: int) -> Tnum:
        return cls.const_val(value)

    @classmethod
    def from_range(cls, min_value: int, max_value: int) -> Tnum:
        """Smallest tnum containing every word of ``[min_value, max_value]``.
        All bits at or below the highest bit where the bounds differ become
        unknown. An empty interval yields bottom.
        """
        min_value &= MASK64
        max_value &= MASK64
        if min_value > max_value:
            return cls.bottom()
        chi = min_value ^ max_value
        width = chi.bit_length()
        if width > WORD_BITS - 1:
            return cls.top()
        delta = (1 << width) - 1
        return cls(min_value & ~delta & MASK64, delta)

    def is_bottom(self) -> bool:
        return self.value & self.mask != 0

    def is_top(self) -> bool:
        return self.value == 0 and self.mask == MASK64

    def is_singleton(self) -> bool:
        return self.mask == 0

    def is_zero(self) -> bool:
        return self.value == 0 and self.mask == 0

    def is_nonnegative(self) -> bool:
        """Sign bit known to be 0."""
        return (self.value | self.mask) & SIGN_BIT == 0

    def is_negative(self) -> bool:
        """Sign bit known to be 1."""
        return self.value & SIGN_BIT != 0 and self.mask & SIGN_BIT == 0

    def le(self, other: Tnum) -> bool:
        """Partial order: γ(self) ⊆ γ(other)."""
        if other.is_top() or self.is_bottom():
            return True
        if other.is_bottom() or self.is_top():
            return False
        if self.value == other.value and self.mask == other.mask:
            return True
        if self.mask & ~other.mask:
            # unknown in self but known in other
            return False
        return self.value & ~other.mask == other.value

    def eq(self, other: Tnum) -> bool:
        """Lattice equivalence (all bottoms are equal)."""
        return self.le(other) and other.le(self)

    def contains(self, other: Tnum) -> bool:
        """Check whether γ(other) ⊆ γ(self)."""
        return other.le(self)

    def member(self, word: int) -> bool:
        """Check whether the concrete word belongs to γ(self)."""
        if self.is_bottom():
            return False
        return (word ^ self.value) & ~self.mask & MASK64 == 0

    def __contains__(self, word: int) -> bool:
        return self.member(word)

    def join(self, other: Tnum) -> Tnum:
        """Least upper bound: known bits survive only where both agree."""
        if self.is_bottom():
            return other
        if other.is_bottom():
            return self
        v = self.value ^ other.value
        m = self.mask | other.mask | v
        return Tnum((self.value | other.value) & ~m & MASK64, m)

    def widen(self, other: Tnum) -> Tnum:
        """The lattice has finite height, so join is a widening."""
        return self.join(other)

    def or_(self, other: Tnum) -> Tnum:
        """Merge used to combine case splits.
        Returns the larger operand when the two are ordered, otherwise keeps
        the bits both operands know and agree on.
        """
        if self.le(other):
            return other
        if other.le(self):
            return self
        mu = self.mask | other.mask
        this_known = self.value & ~mu
        other_known = other.value & ~mu
        disagree = this_known ^ other_known
        return Tnum(this_known & other_known & MASK64, (mu | disagree) & MASK64)

    def meet(self, other: Tnum) -> Tnum:
        """Greatest lower bound; bottom when a bit known in both disagrees."""
        if self.le(other):
            return self
        if other.le(self):
            return other
        mu_both = self.mask & other.mask
        mu_any = self.mask | other.mask
        disagree = (self.value & ~mu_any) ^ (other.value & ~mu_any)
        if disagree:
            return Tnum.bottom()
        return Tnum((self.value | other.value) & ~mu_both & MASK64, mu_both)

    and_ = meet

    def intersect(self, other: Tnum) -> Tnum:
        """Meet without the disagreement check."""
        v = self.value | other.value
        mu = self.mask & other.mask
        return Tnum(v & ~mu & MASK64, mu)

    def countl_zero(self) -> int:
        return bits.leading_zeros(self.value)

    def countr_zero(self) -> int:
        return bits.trailing_zeros(self.value)

    def count_min_leading_zeros(self) -> int:
        """Leading zeros of the largest member."""
        return bits.leading_zeros((self.value + self.mask) & MASK64)

    def count_min_trailing_zeros(self) -> int:
        """Trailing zeros of ``value | mask``, the fewest any member has."""
        return bits.trailing_zeros(self.value | self.mask)

    def count_max_leading_zeros(self) -> int:
        return bits.leading_zeros(self.value)

    def count_max_trailing_zeros(self) -> int:
        return bits.trailing_zeros(self.value)

    def max_value(self) -> int:
        """Largest unsigned member."""
        return self.value | self.mask

    def signed_min_value(self) -> int:
        """Smallest signed member, as an unsigned word."""
        if self.mask & SIGN_BIT:
            return self.value | SIGN_BIT
        return self.value

    def signed_max_value(self) -> int:
        """Largest signed member, as an unsigned word."""
        if self.mask & SIGN_BIT:
            return (self.value | self.mask) & ~SIGN_BIT
        return self.value | self.mask

    def clear_high_bits(self, n: int) -> Tnum:
        """Mark the ``n`` most significant bits as known zero."""
        return Tnum(bits.clear_high_bits(self.value, n), bits.clear_high_bits(self.mask, n))

    def clear_bit(self, pos: int) -> Tnum:
        keep = ~(1 << pos) & MASK64
        return Tnum(self.value & keep, self.mask & keep)

    def bit_size(self) -> int:
        """Number of significant bits of ``value | mask``."""
        return max(self.value.bit_length(), self.mask.bit_length())

    def cast(self, size: int) -> Tnum:
        """Truncate to ``size`` bytes."""
        if size * 8 >= WORD_BITS:
            return self
        low = (1 << (size * 8)) - 1
        return Tnum(self.value & low, self.mask & low)

    def is_aligned(self, size: int) -> bool:
        """Every member is a multiple of ``size`` (a power of two)."""
        if size == 0:
            return True
        return (self.value | self.mask) & (size - 1) == 0

    def subreg(self) -> Tnum:
        """Lower 32-bit subregister."""
        return self.cast(4)

    def clear_subreg(self) -> Tnum:
        high = MASK64 ^ 0xFFFFFFFF
        return Tnum(self.value & high, self.mask & high)

    def with_subreg(self, subreg: Tnum) -> Tnum:
        """Replace the lower 32 bits with those of ``subreg``."""
        upper = self.clear_subreg()
        lower = subreg.subreg()
        return Tnum(upper.value | lower.value, upper.mask | lower.mask)

    def with_const_subreg(self, value: int) -> Tnum:
        return self.with_subreg(Tnum.const_val(value & 0xFFFFFFFF))

    def concretize(self, max_unknown_bits: int = 16) -> Iterator[int]:
        """Iterate the members of γ(self) in ascending order."""
        if self.is_bottom():
            return
        unknown = bits.popcount(self.mask)
        if unknown > max_unknown_bits:
            raise ValueError(
                f"refusing to enumerate 2**{unknown} members (limit 2**{max_unknown_bits})"
            )
        sub = 0
        while True:
            yield self.value | sub
            if sub == self.mask:
                return
            sub = (sub - self.mask) & self.mask

    def to_z3_constraint(self, var: z3.BitVecRef) -> z3.BoolRef:
        """Z3 constraint stating that ``var`` is a member of γ(self)."""
        if self.is_bottom():
            return z3.BoolVal(False)
        known = z3.BitVecVal(~self.mask & MASK64, WORD_BITS)
        return var & known == z3.BitVecVal(self.value, WORD_BITS)

    def to_sbin(self, size: int = WORD_BITS + 1) -> str:
        """Tristate binary string of the top ``size - 1`` bits.
        ``size`` counts a terminator slot, so ``size = 65`` renders the whole
        word with the most significant bit first.
        """
        if size <= 0:
            raise InvariantViolation("to_sbin", "string buffer size must be positive", size=size)
        width = min(size - 1, WORD_BITS)
        chars = []
        for pos in range(WORD_BITS - 1, WORD_BITS - 1 - width, -1):
            if (self.mask >> pos) & 1:
                chars.append("x")
            elif (self.value >> pos) & 1:
                chars.append("1")
            else:
                chars.append("0")
        return "".join(chars)

    def __str__(self) -> str:
        if self.is_bottom():
            return "⊥"
        return self.to_sbin()

    def __repr__(self) -> str:
        return f"Tnum(value={self.value:#x}, mask={self.mask:#x})"


TOP = Tnum.top()
BOTTOM = Tnum.bottom()

__all__ = ["Tnum", "TOP", "BOTTOM"]
