"""The 6502 processor core driven instruction by instruction."""

from __future__ import annotations

import enum
import logging

from nesemu.bus import MainBus
from nesemu.cpu_state import CpuState
from nesemu.data_ops import push
from nesemu.instruction_set import (
    AddressingMode,
    Instruction,
    InstructionKind,
    InstructionSet,
)
from nesemu.status_register import StatusFlag

log = logging.getLogger(__name__)

_M = AddressingMode
_K = InstructionKind

_NO_PC_INCREMENT = frozenset({"JMP", "JSR", "RTS", "BRK", "RTI"})
# 2 internal clocks, 2 to push PC, 1 for SR and 2 to fetch the vector
_INTERRUPT_CLOCKS = 7


class Interrupt(enum.Enum):
    """Interrupt lines of the processor."""

    NON_MASKABLE_INTERRUPT = "NMI"
    RESET = "RES"
    INTERRUPT_REQUEST = "IRQ"


_VECTORS = {
    Interrupt.NON_MASKABLE_INTERRUPT: (0xFFFA, 0xFFFB),
    Interrupt.RESET: (0xFFFC, 0xFFFD),
    Interrupt.INTERRUPT_REQUEST: (0xFFFE, 0xFFFF),
}


class InvalidInstructionError(Exception):
    """The byte at PC is not a legal opcode."""

    def __init__(self, opcode: int, pc: int) -> None:
        super().__init__(f"Invalid instruction 0x{opcode:02X} at PC 0x{pc:04X}")
        self.opcode = opcode
        self.pc = pc


def _flag_bit(state: CpuState, flag: StatusFlag) -> str:
    return "1" if state.sr.get(flag) else "0"


def _status_diff(previous: CpuState, current: CpuState) -> str:
    registers = (
        f"A: ${previous.acc:02X} >> ${current.acc:02X}  "
        f"X: ${previous.x_reg:02X} >> ${current.x_reg:02X}  "
        f"Y: ${previous.y_reg:02X} >> ${current.y_reg:02X}  "
        f"SP: ${previous.sp:02X} >> ${current.sp:02X}"
    )
    flags = " ".join(
        f"{label}: {_flag_bit(previous, flag)}>{_flag_bit(current, flag)}"
        for label, flag in (
            ("N", StatusFlag.NEGATIVE),
            ("Z", StatusFlag.ZERO),
            ("C", StatusFlag.CARRY),
            ("I", StatusFlag.INTERRUPT_DISABLE),
            ("D", StatusFlag.DECIMAL),
            ("V", StatusFlag.OVERFLOW),
            ("B", StatusFlag.BREAK),
        )
    )
    return f"{registers}  SR: ({flags})"


class Cpu:
    """A 6502 that executes whole instructions and waits out their clocks.

    Instructions run atomically; the number of clocks they take is then
    spent idle before the next one starts. Pending interrupts are served
    once the current instruction has completed.
    """

    def __init__(self, bus: MainBus) -> None:
        self.state = CpuState()
        self.bus = bus
        self._instruction_set = InstructionSet()
        self._clocks_before_next_execution = 1
        self._page_boundary_cross_extra_clocks = 0
        self._interrupt_request: Interrupt | None = None

    def power_up(self) -> None:
        """Put the processor in its power-up state."""
        self.state.acc = 0
        self.state.x_reg = 0
        self.state.y_reg = 0
        self.state.sp = 0
        self.reset()

    def reset(self) -> None:
        """Reset the processor and jump through the reset vector."""
        log.info("CPU reset")
        # a reset decrements SP by 3 rather than setting it
        self.state.sp = (self.state.sp - 3) & 0xFF
        self.state.sr.reset()
        self._clocks_before_next_execution = 1
        self._page_boundary_cross_extra_clocks = 0
        self.state.pc = self._read_word(0xFFFC, 0xFFFD)

    def clock(self) -> None:
        """Advance the processor by one clock."""
        interrupt = self._interrupt_request
        if interrupt is not None:
            self._interrupt_request = None
            self._execute_interrupt(interrupt)
            self._clocks_before_next_execution = _INTERRUPT_CLOCKS
            return

        self._clocks_before_next_execution -= 1
        if self._clocks_before_next_execution > 0:
            return

        instruction = self._fetch()
        self.state.page_boundary_crossed = False
        self.state.branch_taken = False
        self.execute_instruction(instruction)

        if self.state.page_boundary_crossed:
            self._page_boundary_cross_extra_clocks += instruction.page_crossing_cost

        # page crossing costs delay the next instruction, not this one
        self._clocks_before_next_execution = (
            instruction.cycles + self._page_boundary_cross_extra_clocks
        )
        self._page_boundary_cross_extra_clocks = 0

    def interrupt(self, interrupt: Interrupt) -> None:
        """Request ``interrupt``; it is served on the next clock."""
        if self._interrupt_request is not None:
            log.warning(
                "Attempting to interrupt CPU while there's a pending interruption"
            )
        self._interrupt_request = interrupt

    def execute(self) -> int:
        """Execute the next instruction and return the clocks it used."""
        instruction = self._fetch()
        self.execute_instruction(instruction)
        return instruction.cycles + self._page_boundary_cross_extra_clocks

    def execute_instruction(self, instruction: Instruction) -> None:
        """Execute ``instruction`` as if it were found at PC."""
        previous = self.state.copy() if log.isEnabledFor(logging.DEBUG) else None
        state = self.state
        operation = instruction.operation
        mode = instruction.addressing_mode
        kind = instruction.kind

        if kind is _K.SINGLE_BYTE:
            operation(state)
        elif kind is _K.INTERNAL_EXEC_ON_MEMORY_DATA:
            _, data = self._load(mode)
            operation(state, data)
        elif kind is _K.STORE_OP:
            self._store(operation(state), mode)
        elif kind is _K.READ_MODIFY_WRITE:
            _, data = self._load(mode)
            self._store(operation(state, data), mode)
        elif kind in (
            _K.PUSH,
            _K.PULL,
            _K.RETURN,
            _K.HARDWARE_INTERRUPT,
            _K.RETURN_FROM_INTERRUPT,
        ):
            operation(state, self.bus)
        elif kind is _K.JUMP:
            address, _ = self._load(mode)
            operation(state, address)
        elif kind is _K.BRANCH:
            _, offset = self._load(mode)
            operation(state, offset)
            if state.branch_taken:
                self._page_boundary_cross_extra_clocks += (
                    2 if state.page_boundary_crossed else 1
                )
        elif kind is _K.CALL:
            address, _ = self._load(mode)
            operation(state, address, self.bus)
        else:
            raise ValueError(f"unknown instruction kind {kind}")

        if instruction.name not in _NO_PC_INCREMENT:
            state.pc = (state.pc + instruction.bytes) & 0xFFFF

        if previous is not None:
            log.debug(
                "CPU executed (PC: $%04X >> $%04X): %s ($%02X)| %s",
                previous.pc,
                state.pc,
                instruction.name,
                instruction.opcode,
                _status_diff(previous, state),
            )

    def _execute_interrupt(self, interrupt: Interrupt) -> None:
        if interrupt is Interrupt.INTERRUPT_REQUEST and self.state.sr.get(
            StatusFlag.INTERRUPT_DISABLE
        ):
            return
        low, high = _VECTORS[interrupt]
        pc = self.state.pc
        push(self.state, pc >> 8, self.bus)
        push(self.state, pc & 0xFF, self.bus)
        push(self.state, int(self.state.sr), self.bus)
        self.state.pc = self._read_word(low, high)

    def _read(self, address: int) -> int:
        return self.bus.read(address & 0xFFFF)

    def _read_word(self, low: int, high: int) -> int:
        return (self._read(high) << 8) | self._read(low)

    def _operand_byte(self, offset: int) -> int:
        return self._read(self.state.pc + offset)

    def _absolute(self) -> tuple[int, int]:
        """Return the absolute address operand and its high byte."""
        low = self._operand_byte(1)
        high = self._operand_byte(2)
        return (high << 8) | low, high

    def _indexed_absolute(self, index: int) -> int:
        base, high = self._absolute()
        address = (base + index) & 0xFFFF
        if address >> 8 != high:
            self.state.page_boundary_crossed = True
        return address

    def _indirect_x(self) -> int:
        base = self._operand_byte(1)
        x = self.state.x_reg
        return self._read_word((base + x) & 0xFF, (base + x + 1) & 0xFF)

    def _indirect_y(self) -> int:
        pointer = self._operand_byte(1)
        low = self._read(pointer)
        high = self._read((pointer + 1) & 0xFF)
        address = (((high << 8) | low) + self.state.y_reg) & 0xFFFF
        self.state.page_boundary_crossed = (address & 0xFF00) != (high << 8)
        return address

    def _effective_address(self, mode: AddressingMode) -> int:
        state = self.state
        if mode is _M.ZERO_PAGE:
            return self._operand_byte(1)
        if mode is _M.ABSOLUTE:
            return self._absolute()[0]
        if mode is _M.INDIRECT_X:
            return self._indirect_x()
        if mode is _M.ABSOLUTE_X:
            return self._indexed_absolute(state.x_reg)
        if mode is _M.ABSOLUTE_Y:
            return self._indexed_absolute(state.y_reg)
        if mode is _M.ZERO_PAGE_X:
            return (self._operand_byte(1) + state.x_reg) & 0xFF
        if mode is _M.ZERO_PAGE_Y:
            return (self._operand_byte(1) + state.y_reg) & 0xFF
        if mode is _M.INDIRECT_Y:
            return self._indirect_y()
        raise ValueError(f"Invalid memory addressing mode: {mode}")

    def _load(self, mode: AddressingMode) -> tuple[int, int]:
        """Return the operand address and data for ``mode``."""
        pc = self.state.pc
        if mode is _M.IMPLIED:
            # the opcode is re-read and discarded
            return (pc + 1) & 0xFFFF, self._read(pc)
        if mode is _M.ACCUMULATOR:
            return (pc + 1) & 0xFFFF, self.state.acc
        if mode is _M.IMMEDIATE:
            address = (pc + 1) & 0xFFFF
            return address, self._read(address)
        if mode is _M.RELATIVE:
            return (pc + 2) & 0xFFFF, self._operand_byte(1)
        if mode is _M.INDIRECT:
            pointer_low = self._operand_byte(1)
            pointer_high = self._operand_byte(2) << 8
            # the pointer's high byte is never carried into
            address = self._read_word(
                pointer_high | pointer_low, pointer_high | ((pointer_low + 1) & 0xFF)
            )
            return address, 0
        address = self._effective_address(mode)
        return address, self._read(address)

    def _store(self, data: int, mode: AddressingMode) -> None:
        if mode in (_M.IMPLIED, _M.ACCUMULATOR, _M.IMMEDIATE, _M.RELATIVE, _M.INDIRECT):
            raise ValueError(f"Invalid store addressing mode: {mode}")
        self.bus.write(self._effective_address(mode), data & 0xFF)

    def _fetch(self) -> Instruction:
        opcode = self._read(self.state.pc)
        instruction = self._instruction_set.lookup(opcode)
        if instruction is None:
            raise InvalidInstructionError(opcode, self.state.pc)
        return instruction