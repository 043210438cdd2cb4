"""Reciprocal-multiplication constants for unsigned division by a constant.
``Divider.divide_by(d)`` classifies a nonzero divisor into one strategy:
- BitShiftDivider: ``d`` is ``2**shift``; ``n // d == n >> shift``
- FastDivider: ``n // d == ((n * magic) >> W) >> shift``
- GeneralDivider: with ``q = (n * magic_low) >> W``,
  ``n // d == (((n - q) >> 1) + q) >> shift``
where ``W`` is the divider width (64, or 32 for the narrow variant). The
constants are the classic round-up reciprocals used by compilers.
"""

from __future__ import annotations

from dataclasses import dataclass

from pytnum.core import bits

SUPPORTED_WIDTHS = (32, 64)


@dataclass(frozen=True)
class Divider:
    """Base class for a divider strategy."""

    width: int

    @staticmethod
    def divide_by(divisor: int, width: int = 64) -> Divider:
        """Classify ``divisor`` and compute its constants."""
        if width not in SUPPORTED_WIDTHS:
            raise ValueError(
                f"unsupported divider width {width}; expected one of {SUPPORTED_WIDTHS}"
            )
        if not 0 < divisor <= bits.word_mask(width):
            raise ValueError(f"divisor must be a nonzero {width}-bit word, got {divisor}")
        floor_log2 = divisor.bit_length() - 1
        if bits.is_power_of_two(divisor):
            return BitShiftDivider(width, floor_log2)
        u = 1 << (floor_log2 + width)
        proposed = u // divisor
        remainder = u - proposed * divisor
        if divisor - remainder < (1 << floor_log2):
            return FastDivider(width, proposed + 1, floor_log2)
        e = 1 << (width - 1 + floor_log2 + 1)
        magic = 2 + (e + (e - divisor)) // divisor
        return GeneralDivider(width, magic & bits.word_mask(width), floor_log2)

    def divide(self, n: int) -> int:
        raise NotImplementedError

    @property
    def strategy(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class FastDivider(Divider):
    magic: int
    shift: int

    def divide(self, n: int) -> int:
        return ((n * self.magic) >> self.width) >> self.shift

    @property
    def strategy(self) -> str:
        return "fast"


@dataclass(frozen=True)
class BitShiftDivider(Divider):
    shift: int

    def divide(self, n: int) -> int:
        return n >> self.shift

    @property
    def strategy(self) -> str:
        return "bitshift"


@dataclass(frozen=True)
class GeneralDivider(Divider):
    magic_low: int
    shift: int

    def divide(self, n: int) -> int:
        q = (n * self.magic_low) >> self.width
        t = ((n - q) >> 1) + q
        return t >> self.shift

    @property
    def strategy(self) -> str:
        return "general"


__all__ = [
    "SUPPORTED_WIDTHS",
    "Divider",
    "FastDivider",
    "BitShiftDivider",
    "GeneralDivider",
]
