"""Data-moving and arithmetic/logic instructions of the 6502.

Each function takes the processor state and, where needed, an operand or the
bus. Read-modify-write operations return the value to be stored back.
"""

from __future__ import annotations

import logging

from nesemu.bus import MainBus
from nesemu.cpu_state import CpuState
from nesemu.status_register import StatusFlag, StatusRegister
from nesemu.utils import bv

log = logging.getLogger(__name__)

_STACK_PAGE = 0x0100
_UNUSED_BIT = 1 << 5
_BREAK_BIT = 1 << StatusFlag.BREAK


def _set_nz(cpu: CpuState, value: int) -> None:
    cpu.sr.auto_set(StatusFlag.NEGATIVE, value)
    cpu.sr.auto_set(StatusFlag.ZERO, value)


# Transfer instructions


def lda(cpu: CpuState, operand: int) -> None:
    """LDA: M -> A."""
    cpu.acc = operand & 0xFF
    _set_nz(cpu, cpu.acc)


def ldx(cpu: CpuState, operand: int) -> None:
    """LDX: M -> X."""
    cpu.x_reg = operand & 0xFF
    _set_nz(cpu, cpu.x_reg)


def ldy(cpu: CpuState, operand: int) -> None:
    """LDY: M -> Y."""
    cpu.y_reg = operand & 0xFF
    _set_nz(cpu, cpu.y_reg)


def sta(cpu: CpuState) -> int:
    """STA: return A to be stored in memory."""
    return cpu.acc


def stx(cpu: CpuState) -> int:
    """STX: return X to be stored in memory."""
    return cpu.x_reg


def sty(cpu: CpuState) -> int:
    """STY: return Y to be stored in memory."""
    return cpu.y_reg


def tax(cpu: CpuState) -> None:
    """TAX: A -> X."""
    cpu.x_reg = cpu.acc
    _set_nz(cpu, cpu.x_reg)


def tay(cpu: CpuState) -> None:
    """TAY: A -> Y."""
    cpu.y_reg = cpu.acc
    _set_nz(cpu, cpu.y_reg)


def tsx(cpu: CpuState) -> None:
    """TSX: SP -> X."""
    cpu.x_reg = cpu.sp
    _set_nz(cpu, cpu.x_reg)


def txa(cpu: CpuState) -> None:
    """TXA: X -> A."""
    cpu.acc = cpu.x_reg
    _set_nz(cpu, cpu.acc)


def txs(cpu: CpuState) -> None:
    """TXS: X -> SP; flags are untouched."""
    cpu.sp = cpu.x_reg


def tya(cpu: CpuState) -> None:
    """TYA: Y -> A."""
    cpu.acc = cpu.y_reg
    _set_nz(cpu, cpu.acc)


# Stack instructions


def push(cpu: CpuState, data: int, bus: MainBus) -> None:
    """Write ``data`` on the stack and decrement SP, wrapping around."""
    log.debug("Push to SP 0x%X - 0x%X", cpu.sp, data)
    bus.write(_STACK_PAGE + cpu.sp, data & 0xFF)
    cpu.sp = (cpu.sp - 1) & 0xFF


def pull(cpu: CpuState, bus: MainBus) -> int:
    """Increment SP, wrapping around, and return the byte on top of the stack."""
    cpu.sp = (cpu.sp + 1) & 0xFF
    data = bus.read(_STACK_PAGE + cpu.sp)
    log.debug("Pull from SP 0x%X - 0x%X", cpu.sp, data)
    return data


def pha(cpu: CpuState, bus: MainBus) -> None:
    """PHA: push A."""
    push(cpu, cpu.acc, bus)


def php(cpu: CpuState, bus: MainBus) -> None:
    """PHP: push SR with the break flag and bit 5 set."""
    push(cpu, int(cpu.sr) | _BREAK_BIT | _UNUSED_BIT, bus)


def pla(cpu: CpuState, bus: MainBus) -> None:
    """PLA: pull A."""
    cpu.acc = pull(cpu, bus)
    _set_nz(cpu, cpu.acc)


def plp(cpu: CpuState, bus: MainBus) -> None:
    """PLP: pull SR, keeping the current break flag."""
    sr = StatusRegister.from_byte(pull(cpu, bus))
    sr.set_value(StatusFlag.BREAK, cpu.sr.get(StatusFlag.BREAK))
    cpu.sr = sr


# Decrements and increments


def dec(cpu: CpuState, operand: int) -> int:
    """DEC: return M - 1."""
    result = (operand - 1) & 0xFF
    _set_nz(cpu, result)
    return result


def dex(cpu: CpuState) -> None:
    """DEX: X - 1 -> X."""
    cpu.x_reg = (cpu.x_reg - 1) & 0xFF
    _set_nz(cpu, cpu.x_reg)


def dey(cpu: CpuState) -> None:
    """DEY: Y - 1 -> Y."""
    cpu.y_reg = (cpu.y_reg - 1) & 0xFF
    _set_nz(cpu, cpu.y_reg)


def inc(cpu: CpuState, operand: int) -> int:
    """INC: return M + 1."""
    result = (operand + 1) & 0xFF
    _set_nz(cpu, result)
    return result


def inx(cpu: CpuState) -> None:
    """INX: X + 1 -> X."""
    cpu.x_reg = (cpu.x_reg + 1) & 0xFF
    _set_nz(cpu, cpu.x_reg)


def iny(cpu: CpuState) -> None:
    """INY: Y + 1 -> Y."""
    cpu.y_reg = (cpu.y_reg + 1) & 0xFF
    _set_nz(cpu, cpu.y_reg)


# Arithmetic operations


def adc(cpu: CpuState, operand: int) -> None:
    """ADC: A + M + C -> A, C."""
    operand &= 0xFF
    carry_in = 1 if cpu.sr.get(StatusFlag.CARRY) else 0
    total = cpu.acc + operand + carry_in
    result = total & 0xFF
    overflow = bv(cpu.acc, 7) == bv(operand, 7) and bv(operand, 7) != bv(result, 7)

    cpu.acc = result
    _set_nz(cpu, cpu.acc)
    cpu.sr.set_value(StatusFlag.CARRY, bool(total & 0x100))
    cpu.sr.set_value(StatusFlag.OVERFLOW, overflow)


def sbc(cpu: CpuState, operand: int) -> None:
    """SBC: A - M - (1 - C) -> A."""
    adc(cpu, ~operand & 0xFF)


# Logic operations


def and_(cpu: CpuState, operand: int) -> None:
    """AND: A AND M -> A."""
    cpu.acc &= operand & 0xFF
    _set_nz(cpu, cpu.acc)


def eor(cpu: CpuState, operand: int) -> None:
    """EOR: A XOR M -> A."""
    cpu.acc = (cpu.acc ^ operand) & 0xFF
    _set_nz(cpu, cpu.acc)


def ora(cpu: CpuState, operand: int) -> None:
    """ORA: A OR M -> A."""
    cpu.acc = (cpu.acc | operand) & 0xFF
    _set_nz(cpu, cpu.acc)


# Shift and rotate instructions


def asl_acc(cpu: CpuState) -> None:
    """ASL on the accumulator."""
    cpu.acc = asl(cpu, cpu.acc)


def asl(cpu: CpuState, operand: int) -> int:
    """ASL: C <- [76543210] <- 0; return the shifted value."""
    result = (operand << 1) & 0xFF
    _set_nz(cpu, result)
    cpu.sr.set_value(StatusFlag.CARRY, bv(operand, 7) != 0)
    return result


def lsr_acc(cpu: CpuState) -> None:
    """LSR on the accumulator."""
    cpu.acc = lsr(cpu, cpu.acc)


def lsr(cpu: CpuState, operand: int) -> int:
    """LSR: 0 -> [76543210] -> C; return the shifted value."""
    result = (operand & 0xFF) >> 1
    cpu.sr.clear(StatusFlag.NEGATIVE)
    cpu.sr.auto_set(StatusFlag.ZERO, result)
    cpu.sr.set_value(StatusFlag.CARRY, bv(operand, 0) != 0)
    return result


def rol_acc(cpu: CpuState) -> None:
    """ROL on the accumulator."""
    cpu.acc = rol(cpu, cpu.acc)


def rol(cpu: CpuState, operand: int) -> int:
    """ROL: C <- [76543210] <- C; return the rotated value."""
    carry_in = 1 if cpu.sr.get(StatusFlag.CARRY) else 0
    result = ((operand << 1) | carry_in) & 0xFF
    _set_nz(cpu, result)
    cpu.sr.set_value(StatusFlag.CARRY, bv(operand, 7) != 0)
    return result


def ror_acc(cpu: CpuState) -> None:
    """ROR on the accumulator."""
    cpu.acc = ror(cpu, cpu.acc)


def ror(cpu: CpuState, operand: int) -> int:
    """ROR: C -> [76543210] -> C; return the rotated value."""
    carry_in = 1 if cpu.sr.get(StatusFlag.CARRY) else 0
    result = ((operand & 0xFF) >> 1) | (carry_in << 7)
    _set_nz(cpu, result)
    cpu.sr.set_value(StatusFlag.CARRY, bv(operand, 0) != 0)
    return result