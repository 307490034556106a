import pytest

from nesemu.status_register import StatusFlag, StatusRegister

ALL_FLAGS = [
    StatusFlag.CARRY,
    StatusFlag.ZERO,
    StatusFlag.INTERRUPT_DISABLE,
    StatusFlag.DECIMAL,
    StatusFlag.BREAK,
    StatusFlag.OVERFLOW,
    StatusFlag.NEGATIVE,
]


def test_status_register_all():
    sr = StatusRegister()
    for flag in ALL_FLAGS:
        assert not sr.get(flag)
        sr.set(flag)
        assert sr.get(flag)
        sr.clear(flag)
        assert not sr.get(flag)


def test_status_register_get():
    sr = StatusRegister((1 << StatusFlag.NEGATIVE) | (1 << StatusFlag.ZERO))
    assert sr.get(StatusFlag.NEGATIVE)
    assert sr.get(StatusFlag.ZERO)
    assert not sr.get(StatusFlag.OVERFLOW)


def test_status_register_set():
    sr = StatusRegister()
    assert not sr.get(StatusFlag.INTERRUPT_DISABLE)
    sr.set(StatusFlag.INTERRUPT_DISABLE)
    assert sr.get(StatusFlag.INTERRUPT_DISABLE)


def test_status_register_clear():
    sr = StatusRegister(1 << StatusFlag.CARRY)
    assert sr.get(StatusFlag.CARRY)
    sr.clear(StatusFlag.CARRY)
    assert not sr.get(StatusFlag.CARRY)


def test_unused_bit_always_reads_set():
    assert int(StatusRegister()) == 0x20
    assert int(StatusRegister.from_byte(0x00)) == 0x20
    assert int(StatusRegister.from_byte(0x81)) == 0xA1


def test_from_byte_round_trip():
    for byte in (0x20, 0x21, 0xFF, 0xE3):
        assert int(StatusRegister.from_byte(byte)) == byte


def test_power_up_and_reset():
    sr = StatusRegister()
    sr.power_up()
    assert int(sr) == 0x24
    sr.clear(StatusFlag.INTERRUPT_DISABLE)
    sr.reset()
    assert sr.get(StatusFlag.INTERRUPT_DISABLE)


def test_set_value():
    sr = StatusRegister()
    sr.set_value(StatusFlag.OVERFLOW, True)
    assert sr.get(StatusFlag.OVERFLOW)
    sr.set_value(StatusFlag.OVERFLOW, False)
    assert not sr.get(StatusFlag.OVERFLOW)


def test_auto_set():
    sr = StatusRegister()
    sr.auto_set(StatusFlag.ZERO, 0)
    sr.auto_set(StatusFlag.NEGATIVE, 0x95)
    assert sr.get(StatusFlag.ZERO)
    assert sr.get(StatusFlag.NEGATIVE)
    sr.auto_set(StatusFlag.ZERO, 0x01)
    sr.auto_set(StatusFlag.NEGATIVE, 0x7F)
    assert not sr.get(StatusFlag.ZERO)
    assert not sr.get(StatusFlag.NEGATIVE)


def test_auto_set_unsupported_flag():
    with pytest.raises(ValueError):
        StatusRegister().auto_set(StatusFlag.CARRY, 0)