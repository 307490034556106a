import pytest

from nesemu import data_ops, flow_ops
from nesemu.cpu_state import CpuState
from nesemu.instruction_set import (
    AddressingMode,
    Instruction,
    InstructionKind,
    InstructionSet,
)
from nesemu.status_register import StatusFlag


@pytest.fixture
def iset():
    return InstructionSet()


def test_lookup_lda_immediate(iset):
    ins = iset.lookup(0xA9)
    assert isinstance(ins, Instruction)
    assert ins.name == "LDA"
    assert ins.opcode == 0xA9
    assert ins.addressing_mode is AddressingMode.IMMEDIATE
    assert ins.kind is InstructionKind.INTERNAL_EXEC_ON_MEMORY_DATA
    assert ins.operation is data_ops.lda
    assert (ins.bytes, ins.cycles, ins.page_crossing_cost) == (2, 2, 0)


def test_lookup_lda_indirect_y_has_page_cost(iset):
    ins = iset.lookup(0xB1)
    assert ins.addressing_mode is AddressingMode.INDIRECT_Y
    assert (ins.bytes, ins.cycles, ins.page_crossing_cost) == (2, 5, 1)


def test_lookup_store_absolute_x(iset):
    ins = iset.lookup(0x9D)
    assert ins.name == "STA"
    assert ins.kind is InstructionKind.STORE_OP
    assert (ins.bytes, ins.cycles, ins.page_crossing_cost) == (3, 5, 0)


def test_lookup_jumps(iset):
    absolute = iset.lookup(0x4C)
    indirect = iset.lookup(0x6C)
    assert absolute.name == indirect.name == "JMP"
    assert absolute.addressing_mode is AddressingMode.ABSOLUTE
    assert indirect.addressing_mode is AddressingMode.INDIRECT
    assert absolute.cycles == 3
    assert indirect.cycles == 5
    assert absolute.operation is flow_ops.jmp


def test_lookup_special_kinds(iset):
    assert iset.lookup(0x00).kind is InstructionKind.HARDWARE_INTERRUPT
    assert iset.lookup(0x00).cycles == 7
    assert iset.lookup(0x20).kind is InstructionKind.CALL
    assert iset.lookup(0x60).kind is InstructionKind.RETURN
    assert iset.lookup(0x40).kind is InstructionKind.RETURN_FROM_INTERRUPT
    assert iset.lookup(0x48).kind is InstructionKind.PUSH
    assert iset.lookup(0x28).kind is InstructionKind.PULL
    assert iset.lookup(0xD0).kind is InstructionKind.BRANCH


def test_accumulator_shifts(iset):
    for opcode, name in ((0x0A, "ASL"), (0x4A, "LSR"), (0x2A, "ROL"), (0x6A, "ROR")):
        ins = iset.lookup(opcode)
        assert ins.name == name
        assert ins.addressing_mode is AddressingMode.ACCUMULATOR
        assert ins.kind is InstructionKind.SINGLE_BYTE


@pytest.mark.parametrize("opcode", [0x02, 0x03, 0xFF, 0x80, 0x1A])
def test_illegal_opcodes_return_none(iset, opcode):
    assert iset.lookup(opcode) is None
    assert opcode not in iset


@pytest.mark.parametrize("opcode", [-1, 0x100])
def test_non_byte_opcode_raises(iset, opcode):
    with pytest.raises(ValueError):
        iset.lookup(opcode)


def test_legal_opcode_count(iset):
    assert len(iset) == 151


def test_table_opcodes_match_keys(iset):
    for ins in iset:
        assert iset.lookup(ins.opcode) is ins


def test_byte_length_follows_addressing_mode(iset):
    one = {AddressingMode.IMPLIED, AddressingMode.ACCUMULATOR}
    three = {
        AddressingMode.ABSOLUTE,
        AddressingMode.ABSOLUTE_X,
        AddressingMode.ABSOLUTE_Y,
        AddressingMode.INDIRECT,
    }
    for ins in iset:
        if ins.addressing_mode in one:
            assert ins.bytes == 1
        elif ins.addressing_mode in three:
            assert ins.bytes == 3
        else:
            assert ins.bytes == 2


def test_page_cost_only_on_indexed_reads(iset):
    for ins in iset:
        if ins.page_crossing_cost:
            assert ins.kind is InstructionKind.INTERNAL_EXEC_ON_MEMORY_DATA
            assert ins.addressing_mode in {
                AddressingMode.ABSOLUTE_X,
                AddressingMode.ABSOLUTE_Y,
                AddressingMode.INDIRECT_Y,
            }


def test_operation_of_and_runs(iset):
    ins = iset.lookup(0x29)
    assert ins.name == "AND"
    cpu = CpuState(acc=0xAC)
    ins.operation(cpu, 0x0F)
    assert cpu.acc == 0x0C
    assert not cpu.sr.get(StatusFlag.ZERO)


def test_operation_of_rmw_returns_value(iset):
    ins = iset.lookup(0xE6)
    assert ins.name == "INC"
    cpu = CpuState()
    assert ins.operation(cpu, 0xFF) == 0
    assert cpu.sr.get(StatusFlag.ZERO)


def test_instruction_is_immutable(iset):
    ins = iset.lookup(0xEA)
    assert ins.name == "NOP"
    with pytest.raises(AttributeError):
        ins.cycles = 9