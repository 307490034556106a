"""The 6502 processor status register."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from nesemu.utils import bv, clear_bit, set_bit

_UNUSED_BIT = 1 << 5


class StatusFlag(enum.IntEnum):
    """Bit positions of the status register flags."""

    NEGATIVE = 7
    OVERFLOW = 6
    # bit 5 is unused and always reads as 1
    BREAK = 4
    DECIMAL = 3  # unused on the NES
    INTERRUPT_DISABLE = 2
    ZERO = 1
    CARRY = 0


@dataclass
class StatusRegister:
    """Processor status flags held in one byte."""

    value: int = 0

    @classmethod
    def from_byte(cls, value: int) -> "StatusRegister":
        """Build a register from a byte, forcing the unused bit on."""
        return cls((value & 0xFF) | _UNUSED_BIT)

    def __int__(self) -> int:
        return (self.value | _UNUSED_BIT) & 0xFF

    def power_up(self) -> None:
        self.value = _UNUSED_BIT | (1 << StatusFlag.INTERRUPT_DISABLE)

    def reset(self) -> None:
        self.set(StatusFlag.INTERRUPT_DISABLE)

    def get(self, flag: StatusFlag) -> bool:
        return bv(self.value, int(flag)) > 0

    def set(self, flag: StatusFlag) -> None:
        self.value = set_bit(self.value, int(flag))

    def clear(self, flag: StatusFlag) -> None:
        self.value = clear_bit(self.value, int(flag))

    def set_value(self, flag: StatusFlag, condition: bool) -> None:
        if condition:
            self.set(flag)
        else:
            self.clear(flag)

    def auto_set(self, flag: StatusFlag, value: int) -> None:
        """Set ZERO or NEGATIVE according to the result ``value``."""
        if flag is StatusFlag.ZERO:
            condition = (value & 0xFF) == 0
        elif flag is StatusFlag.NEGATIVE:
            condition = bool(value & 0x80)
        else:
            raise ValueError(f"auto set of flag {flag.name} is not supported")
        self.set_value(flag, condition)