import pytest

from nesemu.memory import (
    Ciram,
    MemoryAccessError,
    MirroredMemory,
    Mirroring,
    Ram,
    Rom,
)


def test_ram_starts_zeroed_and_round_trips():
    ram = Ram(16)
    assert all(ram.read(address) == 0 for address in range(16))
    ram.write(5, 0xAB)
    assert ram.read(5) == 0xAB
    assert ram.size() == 16


def test_ram_load():
    ram = Ram(8)
    ram.load(2, [1, 2, 3])
    assert [ram.read(a) for a in range(8)] == [0, 0, 1, 2, 3, 0, 0, 0]


def test_ram_out_of_range():
    ram = Ram(4)
    with pytest.raises(MemoryAccessError):
        ram.read(4)
    with pytest.raises(MemoryAccessError):
        ram.write(-1, 1)
    with pytest.raises(MemoryAccessError):
        ram.load(3, [1, 2])


def test_try_write_wraps_bad_data():
    ram = Ram(4)
    with pytest.raises(MemoryAccessError):
        ram.try_write(0, 300)
    assert ram.try_read(0) == 0


def test_rom_is_read_only():
    rom = Rom(4)
    rom.load(0, [9, 8, 7, 6])
    assert [rom.read(a) for a in range(4)] == [9, 8, 7, 6]
    with pytest.raises(MemoryAccessError):
        rom.write(0, 1)
    with pytest.raises(MemoryAccessError):
        rom.try_write(0, 1)


def test_rom_loads_once():
    rom = Rom(4)
    rom.load(0, [1])
    with pytest.raises(MemoryAccessError):
        rom.load(1, [2])
    assert rom.read(1) == 0


def test_mirrored_memory():
    ram = Ram(0x0800)
    mirrored = MirroredMemory(ram, 3)
    assert mirrored.size() == 4 * 0x0800
    mirrored.write(0x0801, 0x42)
    assert ram.read(1) == 0x42
    for mirror in range(4):
        assert mirrored.read(1 + mirror * 0x0800) == 0x42
    assert mirrored.inner() is ram


def test_mirrored_memory_load():
    mirrored = MirroredMemory(Ram(4), 1)
    mirrored.load(0, [5, 6])
    assert mirrored.read(4) == 5
    assert mirrored.read(5) == 6


def test_ciram_horizontal():
    ciram = Ciram(0x0400)
    assert ciram.size() == 4 * 0x0400
    ciram.write(0x0010, 0x11)
    ciram.write(0x0810, 0x22)
    assert ciram.read(0x0410) == 0x11
    assert ciram.read(0x0C10) == 0x22
    assert ciram.read(0x0010) == 0x11


def test_ciram_vertical():
    ciram = Ciram(0x0400)
    ciram.set_mirroring(Mirroring.VERTICAL)
    ciram.write(0x0010, 0x11)
    ciram.write(0x0410, 0x22)
    assert ciram.read(0x0810) == 0x11
    assert ciram.read(0x0C10) == 0x22


def test_ciram_out_of_range():
    ciram = Ciram(0x0400)
    with pytest.raises(MemoryAccessError):
        ciram.read(ciram.size())