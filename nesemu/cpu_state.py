"""Register file of the 6502 processor."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from nesemu.status_register import StatusRegister


@dataclass
class CpuState:
    """Registers and per-instruction timing hints of the processor."""

    acc: int = 0
    x_reg: int = 0
    y_reg: int = 0
    sp: int = 0
    pc: int = 0
    sr: StatusRegister = field(default_factory=StatusRegister)
    # set when an instruction crossed a page; usually costs an extra clock
    page_boundary_crossed: bool = False
    # set when a branch was taken; costs 1 or 2 extra clocks
    branch_taken: bool = False

    def copy(self) -> "CpuState":
        """Return an independent snapshot of this state."""
        return replace(self, sr=StatusRegister(self.sr.value))