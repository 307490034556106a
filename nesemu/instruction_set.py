"""Decoding table of the legal 6502 opcodes."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from nesemu import data_ops as d
from nesemu import flow_ops as f


class AddressingMode(enum.Enum):
    """How an instruction finds its operand."""

    IMPLIED = enum.auto()
    ACCUMULATOR = enum.auto()
    IMMEDIATE = enum.auto()
    ABSOLUTE = enum.auto()
    ZERO_PAGE = enum.auto()
    ABSOLUTE_X = enum.auto()
    ABSOLUTE_Y = enum.auto()
    ZERO_PAGE_X = enum.auto()
    ZERO_PAGE_Y = enum.auto()
    # zero page indexed indirect (X)
    INDIRECT_X = enum.auto()
    # zero page indirect indexed (Y)
    INDIRECT_Y = enum.auto()
    # branch operations
    RELATIVE = enum.auto()
    # jump operations
    INDIRECT = enum.auto()


class InstructionKind(enum.Enum):
    """How the processor drives an instruction's operation.

    The kind fixes the operation's signature:

    - SINGLE_BYTE: ``op(cpu)``
    - INTERNAL_EXEC_ON_MEMORY_DATA: ``op(cpu, data)``
    - STORE_OP: ``op(cpu) -> data`` to be stored
    - READ_MODIFY_WRITE: ``op(cpu, data) -> data`` to be stored
    - PUSH, PULL, RETURN, HARDWARE_INTERRUPT, RETURN_FROM_INTERRUPT: ``op(cpu, bus)``
    - JUMP: ``op(cpu, address)``
    - BRANCH: ``op(cpu, offset)``
    - CALL: ``op(cpu, address, bus)``
    """

    SINGLE_BYTE = enum.auto()
    INTERNAL_EXEC_ON_MEMORY_DATA = enum.auto()
    STORE_OP = enum.auto()
    READ_MODIFY_WRITE = enum.auto()
    PUSH = enum.auto()
    PULL = enum.auto()
    JUMP = enum.auto()
    BRANCH = enum.auto()
    CALL = enum.auto()
    RETURN = enum.auto()
    HARDWARE_INTERRUPT = enum.auto()
    RETURN_FROM_INTERRUPT = enum.auto()


@dataclass(frozen=True)
class Instruction:
    """One decoded opcode."""

    opcode: int
    name: str
    kind: InstructionKind
    operation: Callable[..., Optional[int]]
    addressing_mode: AddressingMode
    bytes: int
    cycles: int
    # extra cycles taken when a page boundary is crossed
    page_crossing_cost: int = 0


_M = AddressingMode
_K = InstructionKind

# (mode, bytes, cycles, page crossing cost) in the order the opcodes are listed
_READ_MODES = (
    (_M.IMMEDIATE, 2, 2, 0),
    (_M.ZERO_PAGE, 2, 3, 0),
    (_M.ZERO_PAGE_X, 2, 4, 0),
    (_M.ABSOLUTE, 3, 4, 0),
    (_M.ABSOLUTE_X, 3, 4, 1),
    (_M.ABSOLUTE_Y, 3, 4, 1),
    (_M.INDIRECT_X, 2, 6, 0),
    (_M.INDIRECT_Y, 2, 5, 1),
)

_RMW_MODES = (
    (_M.ZERO_PAGE, 2, 5, 0),
    (_M.ZERO_PAGE_X, 2, 6, 0),
    (_M.ABSOLUTE, 3, 6, 0),
    (_M.ABSOLUTE_X, 3, 7, 0),
)

_COMPARE_INDEX_MODES = (
    (_M.IMMEDIATE, 2, 2, 0),
    (_M.ZERO_PAGE, 2, 3, 0),
    (_M.ABSOLUTE, 3, 4, 0),
)


def _build_table() -> dict[int, Instruction]:
    table: dict[int, Instruction] = {}

    def add(opcode, name, kind, operation, mode, size, cycles, page_cost=0):
        if opcode in table:
            raise RuntimeError(f"duplicate opcode 0x{opcode:02X}")
        table[opcode] = Instruction(
            opcode, name, kind, operation, mode, size, cycles, page_cost
        )

    def add_modes(name, kind, operation, opcodes, modes):
        for opcode, (mode, size, cycles, page_cost) in zip(opcodes, modes, strict=True):
            add(opcode, name, kind, operation, mode, size, cycles, page_cost)

    def add_implied(name, kind, operation, opcode, cycles):
        add(opcode, name, kind, operation, _M.IMPLIED, 1, cycles)

    exec_on_data = _K.INTERNAL_EXEC_ON_MEMORY_DATA

    # Transfer instructions
    add_modes("LDA", exec_on_data, d.lda,
              (0xA9, 0xA5, 0xB5, 0xAD, 0xBD, 0xB9, 0xA1, 0xB1), _READ_MODES)
    add_modes("LDX", exec_on_data, d.ldx, (0xA2, 0xA6, 0xB6, 0xAE, 0xBE), (
        (_M.IMMEDIATE, 2, 2, 0),
        (_M.ZERO_PAGE, 2, 3, 0),
        (_M.ZERO_PAGE_Y, 2, 4, 0),
        (_M.ABSOLUTE, 3, 4, 0),
        (_M.ABSOLUTE_Y, 3, 4, 1),
    ))
    add_modes("LDY", exec_on_data, d.ldy, (0xA0, 0xA4, 0xB4, 0xAC, 0xBC), (
        (_M.IMMEDIATE, 2, 2, 0),
        (_M.ZERO_PAGE, 2, 3, 0),
        (_M.ZERO_PAGE_X, 2, 4, 0),
        (_M.ABSOLUTE, 3, 4, 0),
        (_M.ABSOLUTE_X, 3, 4, 1),
    ))
    add_modes("STA", _K.STORE_OP, d.sta,
              (0x85, 0x95, 0x8D, 0x9D, 0x99, 0x81, 0x91), (
        (_M.ZERO_PAGE, 2, 3, 0),
        (_M.ZERO_PAGE_X, 2, 4, 0),
        (_M.ABSOLUTE, 3, 4, 0),
        (_M.ABSOLUTE_X, 3, 5, 0),
        (_M.ABSOLUTE_Y, 3, 5, 0),
        (_M.INDIRECT_X, 2, 6, 0),
        (_M.INDIRECT_Y, 2, 6, 0),
    ))
    add_modes("STX", _K.STORE_OP, d.stx, (0x86, 0x96, 0x8E), (
        (_M.ZERO_PAGE, 2, 3, 0),
        (_M.ZERO_PAGE_Y, 2, 4, 0),
        (_M.ABSOLUTE, 3, 4, 0),
    ))
    add_modes("STY", _K.STORE_OP, d.sty, (0x84, 0x94, 0x8C), (
        (_M.ZERO_PAGE, 2, 3, 0),
        (_M.ZERO_PAGE_X, 2, 4, 0),
        (_M.ABSOLUTE, 3, 4, 0),
    ))
    for name, operation, opcode in (
        ("TAX", d.tax, 0xAA),
        ("TAY", d.tay, 0xA8),
        ("TSX", d.tsx, 0xBA),
        ("TXA", d.txa, 0x8A),
        ("TXS", d.txs, 0x9A),
        ("TYA", d.tya, 0x98),
    ):
        add_implied(name, _K.SINGLE_BYTE, operation, opcode, 2)

    # Stack instructions
    add_implied("PHA", _K.PUSH, d.pha, 0x48, 3)
    add_implied("PHP", _K.PUSH, d.php, 0x08, 3)
    add_implied("PLA", _K.PULL, d.pla, 0x68, 4)
    add_implied("PLP", _K.PULL, d.plp, 0x28, 4)

    # Decrements and increments
    add_modes("DEC", _K.READ_MODIFY_WRITE, d.dec, (0xC6, 0xD6, 0xCE, 0xDE), _RMW_MODES)
    add_implied("DEX", _K.SINGLE_BYTE, d.dex, 0xCA, 2)
    add_implied("DEY", _K.SINGLE_BYTE, d.dey, 0x88, 2)
    add_modes("INC", _K.READ_MODIFY_WRITE, d.inc, (0xE6, 0xF6, 0xEE, 0xFE), _RMW_MODES)
    add_implied("INX", _K.SINGLE_BYTE, d.inx, 0xE8, 2)
    add_implied("INY", _K.SINGLE_BYTE, d.iny, 0xC8, 2)

    # Arithmetic and logical operations
    add_modes("ADC", exec_on_data, d.adc,
              (0x69, 0x65, 0x75, 0x6D, 0x7D, 0x79, 0x61, 0x71), _READ_MODES)
    add_modes("SBC", exec_on_data, d.sbc,
              (0xE9, 0xE5, 0xF5, 0xED, 0xFD, 0xF9, 0xE1, 0xF1), _READ_MODES)
    add_modes("AND", exec_on_data, d.and_,
              (0x29, 0x25, 0x35, 0x2D, 0x3D, 0x39, 0x21, 0x31), _READ_MODES)
    add_modes("EOR", exec_on_data, d.eor,
              (0x49, 0x45, 0x55, 0x4D, 0x5D, 0x59, 0x41, 0x51), _READ_MODES)
    add_modes("ORA", exec_on_data, d.ora,
              (0x09, 0x05, 0x15, 0x0D, 0x1D, 0x19, 0x01, 0x11), _READ_MODES)

    # Shift and rotation instructions
    for name, acc_operation, operation, acc_opcode, opcodes in (
        ("ASL", d.asl_acc, d.asl, 0x0A, (0x06, 0x16, 0x0E, 0x1E)),
        ("LSR", d.lsr_acc, d.lsr, 0x4A, (0x46, 0x56, 0x4E, 0x5E)),
        ("ROL", d.rol_acc, d.rol, 0x2A, (0x26, 0x36, 0x2E, 0x3E)),
        ("ROR", d.ror_acc, d.ror, 0x6A, (0x66, 0x76, 0x6E, 0x7E)),
    ):
        add(acc_opcode, name, _K.SINGLE_BYTE, acc_operation, _M.ACCUMULATOR, 1, 2)
        add_modes(name, _K.READ_MODIFY_WRITE, operation, opcodes, _RMW_MODES)

    # Flag instructions
    for name, operation, opcode in (
        ("CLC", f.clc, 0x18),
        ("CLD", f.cld, 0xD8),
        ("CLI", f.cli, 0x58),
        ("CLV", f.clv, 0xB8),
        ("SEC", f.sec, 0x38),
        ("SED", f.sed, 0xF8),
        ("SEI", f.sei, 0x78),
    ):
        add_implied(name, _K.SINGLE_BYTE, operation, opcode, 2)

    # Comparisons
    add_modes("CMP", exec_on_data, f.cmp,
              (0xC9, 0xC5, 0xD5, 0xCD, 0xDD, 0xD9, 0xC1, 0xD1), _READ_MODES)
    add_modes("CPX", exec_on_data, f.cpx, (0xE0, 0xE4, 0xEC), _COMPARE_INDEX_MODES)
    add_modes("CPY", exec_on_data, f.cpy, (0xC0, 0xC4, 0xCC), _COMPARE_INDEX_MODES)

    # Conditional branch instructions
    for name, operation, opcode in (
        ("BCC", f.bcc, 0x90),
        ("BCS", f.bcs, 0xB0),
        ("BEQ", f.beq, 0xF0),
        ("BMI", f.bmi, 0x30),
        ("BNE", f.bne, 0xD0),
        ("BPL", f.bpl, 0x10),
        ("BVC", f.bvc, 0x50),
        ("BVS", f.bvs, 0x70),
    ):
        add(opcode, name, _K.BRANCH, operation, _M.RELATIVE, 2, 2)

    # Jumps and subroutines
    add(0x4C, "JMP", _K.JUMP, f.jmp, _M.ABSOLUTE, 3, 3)
    add(0x6C, "JMP", _K.JUMP, f.jmp, _M.INDIRECT, 3, 5)
    add(0x20, "JSR", _K.CALL, f.jsr, _M.ABSOLUTE, 3, 6)
    add_implied("RTI", _K.RETURN_FROM_INTERRUPT, f.rti, 0x40, 6)

    # Interrupts
    add_implied("BRK", _K.HARDWARE_INTERRUPT, f.brk, 0x00, 7)
    add_implied("RTS", _K.RETURN, f.rts, 0x60, 6)

    # Other
    add(0x24, "BIT", exec_on_data, f.bit, _M.ZERO_PAGE, 2, 3)
    add(0x2C, "BIT", exec_on_data, f.bit, _M.ABSOLUTE, 3, 4)
    add_implied("NOP", _K.SINGLE_BYTE, f.nop, 0xEA, 2)

    return table


_LEGAL_OPCODES = _build_table()


class InstructionSet:
    """The legal opcode set of the processor."""

    def __init__(self) -> None:
        self._table = _LEGAL_OPCODES

    def lookup(self, opcode: int) -> Optional[Instruction]:
        """Return the instruction for ``opcode``, or None if it is not legal."""
        if not 0 <= opcode <= 0xFF:
            raise ValueError(f"opcode must be a byte, got {opcode}")
        return self._table.get(opcode)

    def __contains__(self, opcode: object) -> bool:
        return opcode in self._table

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self._table.values())

    def __len__(self) -> int:
        return len(self._table)