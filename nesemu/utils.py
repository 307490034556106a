"""Bit manipulation helpers used across the emulator."""

from __future__ import annotations

from typing import Union

_U8 = 0xFF
_U16 = 0xFFFF


def bv(value: int, bit: int) -> int:
    """Return the value (0 or 1) of ``bit`` in the 8-bit ``value``."""
    return ((value & _U8) >> (bit % 8)) & 1


def bv_16(value: int, bit: int) -> int:
    """Return the value (0 or 1) of ``bit`` in the 16-bit ``value``."""
    return ((value & _U16) >> (bit % 16)) & 1


def bvs_8(value: int, major_bit: int, minor_bit: int) -> int:
    """Return the bits of ``value`` between ``major_bit`` and ``minor_bit`` inclusive."""
    if major_bit < minor_bit:
        raise ValueError("major_bit must not be lower than minor_bit")
    return ((value & _U8) >> minor_bit) & ((1 << (major_bit - minor_bit + 1)) - 1)


def set_bit(byte: int, bit: int) -> int:
    """Return ``byte`` with ``bit`` set."""
    return (byte | (1 << bit)) & _U8


def clear_bit(byte: int, bit: int) -> int:
    """Return ``byte`` with ``bit`` cleared."""
    return byte & ~(1 << bit) & _U8


GroupLike = Union[int, "BitGroup"]


def _mask_of(group: GroupLike) -> int:
    mask = int(group) & _U16
    if mask == 0:
        raise ValueError("a bit group needs at least one bit")
    return mask


def _trailing_zeros(mask: int) -> int:
    return (mask & -mask).bit_length() - 1


class BitGroup:
    """A 16-bit word addressed through groups of consecutive bits.

    A group is a mask that must be one run of consecutive 1s.
    """

    __slots__ = ("_value",)

    def __init__(self, value: int = 0) -> None:
        self._value = value & _U16

    def __int__(self) -> int:
        return self._value

    def __index__(self) -> int:
        return self._value

    def __eq__(self, other: object) -> bool:
        if isinstance(other, BitGroup):
            return self._value == other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    def __repr__(self) -> str:
        return f"BitGroup(0x{self._value:04X})"

    def get(self, group: GroupLike) -> int:
        """Return the value held by ``group``, shifted down to bit 0."""
        mask = _mask_of(group)
        return (self._value & mask) >> _trailing_zeros(mask)

    def set(self, group: GroupLike, value: int) -> None:
        """Store ``value`` into ``group``."""
        mask = _mask_of(group)
        self.clear(mask)
        self._value = (self._value | (value << _trailing_zeros(mask))) & _U16

    def overflowing_add(self, group: GroupLike, increment: int) -> bool:
        """Add ``increment`` to ``group``; return whether it overflowed."""
        mask = _mask_of(group)
        shift = _trailing_zeros(mask)
        value = self.get(mask)
        modulo = (mask >> shift) + 1
        overflow = value + increment >= modulo
        self.set(mask, value + increment % modulo)
        return overflow

    def toggle(self, group: GroupLike) -> None:
        """Invert every bit of ``group``."""
        mask = _mask_of(group)
        shift = _trailing_zeros(mask)
        value = self.get(mask)
        self.set(mask, ~value & (mask >> shift))

    def clear(self, group: GroupLike) -> None:
        """Zero every bit of ``group``."""
        mask = _mask_of(group)
        self._value &= ~mask & _U16