"""Double-width (128-bit) tnums.
Used as scratch space when a 64-bit product must be formed without losing
the carries that flow into the upper half, e.g. the reciprocal multiply of
``fast_divide``. Never returned by the public API.
"""

from __future__ import annotations

from dataclasses import dataclass

from pytnum.core.bits import MASK64, MASK128, WORD_BITS
from pytnum.core.tnum import Tnum


@dataclass(frozen=True)
class WideTnum:
    """Tristate number over 128-bit words."""

    value: int
    mask: int

    @classmethod
    def from_tnum(cls, t: Tnum) -> WideTnum:
        """Zero-extend a 64-bit tnum."""
        return cls(t.value, t.mask)

    @classmethod
    def const_val(cls, value: int) -> WideTnum:
        return cls(value & MASK128, 0)

    def add(self, other: WideTnum) -> WideTnum:
        sm = (self.mask + other.mask) & MASK128
        sv = (self.value + other.value) & MASK128
        sigma = (sm + sv) & MASK128
        chi = sigma ^ sv
        mu = chi | self.mask | other.mask
        return WideTnum(sv & ~mu & MASK128, mu)

    def mul(self, other: WideTnum) -> WideTnum:
        """Bit-serial multiply, same scheme as the 64-bit ``mul``."""
        a_value, a_mask = self.value, self.mask
        b_value, b_mask = other.value, other.mask
        acc_v = (a_value * b_value) & MASK128
        acc_m = WideTnum(0, 0)
        while a_value or a_mask:
            if a_value & 1:
                acc_m = acc_m.add(WideTnum(0, b_mask))
            elif a_mask & 1:
                acc_m = acc_m.add(WideTnum(0, b_value | b_mask))
            a_value >>= 1
            a_mask >>= 1
            b_value = (b_value << 1) & MASK128
            b_mask = (b_mask << 1) & MASK128
        return WideTnum(acc_v, 0).add(acc_m)

    def high(self) -> Tnum:
        """Upper 64 bits."""
        return Tnum(self.value >> WORD_BITS, self.mask >> WORD_BITS)

    def low(self) -> Tnum:
        return Tnum(self.value & MASK64, self.mask & MASK64)

    def shifted_high(self, width: int) -> Tnum:
        """Bits ``[width, width + 64)`` as a 64-bit tnum."""
        return Tnum((self.value >> width) & MASK64, (self.mask >> width) & MASK64)


__all__ = ["WideTnum"]
