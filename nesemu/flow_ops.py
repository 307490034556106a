"""Flag, comparison, branch, jump and interrupt instructions of the 6502."""

from __future__ import annotations

from nesemu.bus import MainBus
from nesemu.cpu_state import CpuState
from nesemu.data_ops import pull, push
from nesemu.status_register import StatusFlag, StatusRegister
from nesemu.utils import bv

_BREAK_BIT = 1 << StatusFlag.BREAK
_IRQ_VECTOR_LOW = 0xFFFE
_IRQ_VECTOR_HIGH = 0xFFFF


def _signed_byte(value: int) -> int:
    value &= 0xFF
    return value - 0x100 if value & 0x80 else value


# Flag instructions


def clc(cpu: CpuState) -> None:
    """CLC: 0 -> C."""
    cpu.sr.clear(StatusFlag.CARRY)


def cld(cpu: CpuState) -> None:
    """CLD: 0 -> D."""
    cpu.sr.clear(StatusFlag.DECIMAL)


def cli(cpu: CpuState) -> None:
    """CLI: 0 -> I."""
    cpu.sr.clear(StatusFlag.INTERRUPT_DISABLE)


def clv(cpu: CpuState) -> None:
    """CLV: 0 -> V."""
    cpu.sr.clear(StatusFlag.OVERFLOW)


def sec(cpu: CpuState) -> None:
    """SEC: 1 -> C."""
    cpu.sr.set(StatusFlag.CARRY)


def sed(cpu: CpuState) -> None:
    """SED: 1 -> D."""
    cpu.sr.set(StatusFlag.DECIMAL)


def sei(cpu: CpuState) -> None:
    """SEI: 1 -> I."""
    cpu.sr.set(StatusFlag.INTERRUPT_DISABLE)


# Comparisons


def generic_cmp(cpu: CpuState, a: int, b: int) -> None:
    """Set N, Z and C from the comparison ``a - b``."""
    a &= 0xFF
    b &= 0xFF
    result = (a - b) & 0xFF
    cpu.sr.auto_set(StatusFlag.NEGATIVE, result)
    cpu.sr.auto_set(StatusFlag.ZERO, result)
    cpu.sr.set_value(StatusFlag.CARRY, a >= b)


def cmp(cpu: CpuState, operand: int) -> None:
    """CMP: A - M."""
    generic_cmp(cpu, cpu.acc, operand)


def cpx(cpu: CpuState, operand: int) -> None:
    """CPX: X - M."""
    generic_cmp(cpu, cpu.x_reg, operand)


def cpy(cpu: CpuState, operand: int) -> None:
    """CPY: Y - M."""
    generic_cmp(cpu, cpu.y_reg, operand)


# Conditional branches


def branch(cpu: CpuState, condition: bool, offset: int) -> None:
    """Move PC by the signed byte ``offset`` when ``condition`` holds."""
    if not condition:
        return
    cpu.branch_taken = True
    new_pc = (cpu.pc + _signed_byte(offset)) & 0xFFFF
    cpu.page_boundary_crossed = ((cpu.pc ^ new_pc) & 0x0100) > 0
    cpu.pc = new_pc


def bcc(cpu: CpuState, offset: int) -> None:
    """BCC: branch on C = 0."""
    branch(cpu, not cpu.sr.get(StatusFlag.CARRY), offset)


def bcs(cpu: CpuState, offset: int) -> None:
    """BCS: branch on C = 1."""
    branch(cpu, cpu.sr.get(StatusFlag.CARRY), offset)


def beq(cpu: CpuState, offset: int) -> None:
    """BEQ: branch on Z = 1."""
    branch(cpu, cpu.sr.get(StatusFlag.ZERO), offset)


def bmi(cpu: CpuState, offset: int) -> None:
    """BMI: branch on N = 1."""
    branch(cpu, cpu.sr.get(StatusFlag.NEGATIVE), offset)


def bne(cpu: CpuState, offset: int) -> None:
    """BNE: branch on Z = 0."""
    branch(cpu, not cpu.sr.get(StatusFlag.ZERO), offset)


def bpl(cpu: CpuState, offset: int) -> None:
    """BPL: branch on N = 0."""
    branch(cpu, not cpu.sr.get(StatusFlag.NEGATIVE), offset)


def bvc(cpu: CpuState, offset: int) -> None:
    """BVC: branch on V = 0."""
    branch(cpu, not cpu.sr.get(StatusFlag.OVERFLOW), offset)


def bvs(cpu: CpuState, offset: int) -> None:
    """BVS: branch on V = 1."""
    branch(cpu, cpu.sr.get(StatusFlag.OVERFLOW), offset)


# Jumps and subroutines


def jmp(cpu: CpuState, address: int) -> None:
    """JMP: address -> PC."""
    cpu.pc = address & 0xFFFF


def jsr(cpu: CpuState, address: int, bus: MainBus) -> None:
    """JSR: push PC+2, then jump to ``address``."""
    return_address = (cpu.pc + 2) & 0xFFFF
    push(cpu, return_address >> 8, bus)
    push(cpu, return_address & 0xFF, bus)
    cpu.pc = address & 0xFFFF


def rts(cpu: CpuState, bus: MainBus) -> None:
    """RTS: pull PC, then PC + 1 -> PC."""
    pcl = pull(cpu, bus)
    pch = pull(cpu, bus)
    cpu.pc = (((pch << 8) | pcl) + 1) & 0xFFFF


# Interrupts


def brk(cpu: CpuState, bus: MainBus) -> None:
    """BRK: push PC+2 and SR with the break flag, jump through the IRQ vector."""
    return_address = (cpu.pc + 2) & 0xFFFF
    push(cpu, return_address >> 8, bus)
    push(cpu, return_address & 0xFF, bus)
    push(cpu, int(cpu.sr) | _BREAK_BIT, bus)
    adl = bus.read(_IRQ_VECTOR_LOW)
    adh = bus.read(_IRQ_VECTOR_HIGH)
    cpu.pc = (adh << 8) | adl
    cpu.sr.set(StatusFlag.INTERRUPT_DISABLE)


def rti(cpu: CpuState, bus: MainBus) -> None:
    """RTI: pull SR (break flag ignored), then pull PC."""
    stack_sr = pull(cpu, bus) & ~_BREAK_BIT & 0xFF
    cpu.sr = StatusRegister.from_byte(stack_sr)
    pcl = pull(cpu, bus)
    pch = pull(cpu, bus)
    cpu.pc = (pch << 8) | pcl


# Other


def bit(cpu: CpuState, operand: int) -> None:
    """BIT: M7 -> N, M6 -> V, Z from A AND M."""
    cpu.sr.set_value(StatusFlag.NEGATIVE, bv(operand, 7) != 0)
    cpu.sr.set_value(StatusFlag.OVERFLOW, bv(operand, 6) != 0)
    cpu.sr.auto_set(StatusFlag.ZERO, cpu.acc & operand)


def nop(cpu: CpuState) -> None:
    """NOP: no operation."""