import pytest

from nesemu.bus import (
    AddressRange,
    BusError,
    BusReadError,
    BusWriteError,
    DeviceAlreadyAttachedError,
    DeviceOverlapError,
    MainBus,
    MissingBusDeviceError,
)
from nesemu.memory import Ram, Rom


def test_bus_read_without_attached_devices():
    bus = MainBus()
    with pytest.raises(MissingBusDeviceError) as info:
        bus.read(0x4020)
    assert info.value.address == 0x4020


def test_bus_write_without_attached_devices():
    bus = MainBus()
    with pytest.raises(MissingBusDeviceError) as info:
        bus.write(0x8000, 0xF0)
    assert info.value.address == 0x8000


def test_missing_device_is_a_bus_error():
    bus = MainBus()
    with pytest.raises(BusError):
        bus.read(0xFFFF)


def test_internal_ram_is_mirrored():
    bus = MainBus()
    bus.write(0x0001, 0xAB)
    assert bus.read(0x0001) == 0xAB
    assert bus.read(0x0801) == 0xAB
    assert bus.read(0x1001) == 0xAB
    assert bus.read(0x1801) == 0xAB


def test_internal_ram_starts_zeroed():
    bus = MainBus()
    assert bus.read(0x1234) == 0


def test_attached_device_uses_virtual_addresses():
    bus = MainBus()
    ram = Ram(0x100)
    bus.attach("Test", ram, AddressRange(0x6000, 0x60FF))
    bus.write(0x6010, 0x42)
    assert ram.read(0x10) == 0x42
    assert bus.read(0x6010) == 0x42


def test_attach_same_id_twice():
    bus = MainBus()
    bus.attach("Test", Ram(0x10), AddressRange(0x6000, 0x600F))
    with pytest.raises(DeviceAlreadyAttachedError) as info:
        bus.attach("Test", Ram(0x10), AddressRange(0x7000, 0x700F))
    assert info.value.device_id == "Test"


def test_attach_overlapping_ranges():
    bus = MainBus()
    bus.attach("A", Ram(0x100), AddressRange(0x6000, 0x60FF))
    with pytest.raises(DeviceOverlapError) as info:
        bus.attach("B", Ram(0x100), AddressRange(0x60FF, 0x61FE))
    assert info.value.registered_id == "A"


def test_attach_adjacent_ranges():
    bus = MainBus()
    bus.attach("A", Ram(0x100), AddressRange(0x6000, 0x60FF))
    bus.attach("B", Ram(0x100), AddressRange(0x6100, 0x61FF))
    bus.write(0x60FF, 1)
    bus.write(0x6100, 2)
    assert (bus.read(0x60FF), bus.read(0x6100)) == (1, 2)


def test_detach_removes_device():
    bus = MainBus()
    bus.attach("Test", Ram(0x10), AddressRange(0x6000, 0x600F))
    bus.detach("Test")
    with pytest.raises(MissingBusDeviceError):
        bus.read(0x6000)


def test_detach_allows_reattach():
    bus = MainBus()
    bus.attach("Test", Ram(0x10), AddressRange(0x6000, 0x600F))
    bus.detach("Test")
    bus.attach("Test", Ram(0x10), AddressRange(0x6000, 0x600F))
    bus.write(0x6001, 9)
    assert bus.read(0x6001) == 9


def test_write_to_rom_is_a_write_error():
    bus = MainBus()
    rom = Rom(0x10)
    rom.load(0, [0xEA, 0x60])
    bus.attach("ROM", rom, AddressRange(0x8000, 0x800F))
    assert bus.read(0x8001) == 0x60
    with pytest.raises(BusWriteError) as info:
        bus.write(0x8000, 0x01)
    assert info.value.device_id == "ROM"
    assert info.value.address == 0x8000
    assert "read-only" in info.value.details


def test_read_past_device_end_is_a_read_error():
    bus = MainBus()
    bus.attach("Small", Ram(0x10), AddressRange(0x6000, 0x60FF))
    with pytest.raises(BusReadError) as info:
        bus.read(0x6020)
    assert info.value.device_id == "Small"
    assert info.value.address == 0x6020


def test_address_range_validation():
    with pytest.raises(ValueError):
        AddressRange(0x2000, 0x1000)
    with pytest.raises(ValueError):
        AddressRange(0, 0x10000)


def test_address_range_length_and_membership():
    addr_range = AddressRange(0x6000, 0x60FF)
    assert len(addr_range) == 0x100
    assert 0x60FF in addr_range
    assert 0x6100 not in addr_range