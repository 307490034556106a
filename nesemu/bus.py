"""The main (CPU) bus: internal RAM plus devices attached to address ranges."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from nesemu.memory import MemoryAccessError, Memory, MirroredMemory, Ram

log = logging.getLogger(__name__)

# CPU memory map: 2 kB of internal RAM mirrored across $0000-$1FFF
RAM_START = 0x0000
RAM_END = 0x1FFF
RAM_SIZE = 0x2000
RAM_MIRRORS = 3

_CPU_BUS = "CPU"
_RAM_DEVICE = "RAM"


class BusError(Exception):
    """Base class for bus failures."""

    def __init__(self, message: str, *, bus_id: str) -> None:
        super().__init__(message)
        self.bus_id = bus_id


class DeviceAlreadyAttachedError(BusError):
    """A device with the same id is already attached to the bus."""

    def __init__(self, bus_id: str, device_id: str) -> None:
        super().__init__(
            f"Device '{device_id}' is already attached to the {bus_id} bus",
            bus_id=bus_id,
        )
        self.device_id = device_id


class DeviceOverlapError(BusError):
    """A device's address range overlaps with one already attached."""

    def __init__(
        self,
        bus_id: str,
        device_id: str,
        addr_range: "AddressRange",
        registered_id: str,
        registered_range: "AddressRange",
    ) -> None:
        super().__init__(
            f"Device '{device_id}' (with address {addr_range}) overlaps with "
            f"'{registered_id}' (with address {registered_range})",
            bus_id=bus_id,
        )
        self.device_id = device_id
        self.registered_id = registered_id


class MissingBusDeviceError(BusError):
    """No device answers at the requested address."""

    def __init__(self, bus_id: str, address: int) -> None:
        super().__init__(
            f"No device on the {bus_id} bus at address 0x{address:04X}",
            bus_id=bus_id,
        )
        self.address = address


class BusReadError(BusError):
    """A device failed while being read through the bus."""

    def __init__(self, bus_id: str, device_id: str, address: int, details: str) -> None:
        super().__init__(
            f"{bus_id} bus read from '{device_id}' at 0x{address:04X} failed: {details}",
            bus_id=bus_id,
        )
        self.device_id = device_id
        self.address = address
        self.details = details


class BusWriteError(BusError):
    """A device failed while being written through the bus."""

    def __init__(self, bus_id: str, device_id: str, address: int, details: str) -> None:
        super().__init__(
            f"{bus_id} bus write to '{device_id}' at 0x{address:04X} failed: {details}",
            bus_id=bus_id,
        )
        self.device_id = device_id
        self.address = address
        self.details = details


@dataclass(frozen=True)
class AddressRange:
    """An inclusive range of 16-bit bus addresses."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if not (0 <= self.start <= 0xFFFF and 0 <= self.end <= 0xFFFF):
            raise ValueError("address range limits must be 16-bit addresses")
        if self.start > self.end:
            raise ValueError("address range start must not be after its end")

    def __contains__(self, address: object) -> bool:
        return isinstance(address, int) and self.start <= address <= self.end

    def __len__(self) -> int:
        return self.end - self.start + 1

    def __str__(self) -> str:
        return f"${self.start:04X}-${self.end:04X}"


@dataclass
class _Device:
    memory: Memory
    addr_range: AddressRange


class MainBus:
    """CPU bus with built-in mirrored RAM and attachable devices."""

    def __init__(self) -> None:
        self._devices: dict[str, _Device] = {}
        self._ram = MirroredMemory(Ram(RAM_SIZE // (RAM_MIRRORS + 1)), RAM_MIRRORS)

    def attach(self, device_id: str, memory: Memory, addr_range: AddressRange) -> None:
        """Map ``memory`` onto ``addr_range`` under the name ``device_id``."""
        if device_id in self._devices:
            raise DeviceAlreadyAttachedError(_CPU_BUS, device_id)

        for registered_id, registered in self._devices.items():
            other = registered.addr_range
            span = max(other.end, addr_range.end) + 1 - min(other.start, addr_range.start)
            if len(addr_range) + len(other) > span:
                raise DeviceOverlapError(
                    _CPU_BUS, device_id, addr_range, registered_id, other
                )

        self._devices[device_id] = _Device(memory, addr_range)

    def detach(self, device_id: str) -> None:
        """Remove a device; unknown ids are ignored."""
        self._devices.pop(device_id, None)

    def _route(self, address: int) -> tuple[str, int, Memory]:
        if RAM_START <= address <= RAM_END:
            return _RAM_DEVICE, address - RAM_START, self._ram
        for device_id, device in self._devices.items():
            if address in device.addr_range:
                return device_id, address - device.addr_range.start, device.memory
        raise MissingBusDeviceError(_CPU_BUS, address)

    def read(self, address: int) -> int:
        """Read a byte from whichever device answers at ``address``."""
        device_id, virtual_address, memory = self._route(address)
        try:
            data = memory.try_read(virtual_address)
        except MemoryAccessError as error:
            raise BusReadError(_CPU_BUS, device_id, address, str(error)) from error
        log.debug("Bus (CPU) read from: %04X <- %02X", address, data)
        return data

    def write(self, address: int, data: int) -> None:
        """Write a byte to whichever device answers at ``address``."""
        log.debug("Bus (CPU) write to: %04X <- %02X", address, data)
        device_id, virtual_address, memory = self._route(address)
        try:
            memory.try_write(virtual_address, data)
        except MemoryAccessError as error:
            raise BusWriteError(_CPU_BUS, device_id, address, str(error)) from error