"""Memory devices: RAM, ROM, mirrored memory and the nametable CIRAM."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from typing import Generic, Iterable, TypeVar


class MemoryAccessError(Exception):
    """An invalid access to a memory device."""


class Memory(ABC):
    """A byte-addressable device."""

    @abstractmethod
    def read(self, address: int) -> int:
        """Return the byte at ``address``."""

    @abstractmethod
    def write(self, address: int, data: int) -> None:
        """Store ``data`` at ``address``."""

    @abstractmethod
    def size(self) -> int:
        """Return the number of addressable bytes."""

    def try_read(self, address: int) -> int:
        """Read, reporting any failure as :class:`MemoryAccessError`."""
        try:
            return self.read(address)
        except MemoryAccessError:
            raise
        except (IndexError, ValueError, TypeError) as error:
            raise MemoryAccessError(str(error)) from error

    def try_write(self, address: int, data: int) -> None:
        """Write, reporting any failure as :class:`MemoryAccessError`."""
        try:
            self.write(address, data)
        except MemoryAccessError:
            raise
        except (IndexError, ValueError, TypeError) as error:
            raise MemoryAccessError(str(error)) from error


def _check_address(address: int, size: int) -> None:
    if not 0 <= address < size:
        raise MemoryAccessError(
            f"address 0x{address:04X} out of range for memory of size 0x{size:X}"
        )


def _check_span(address: int, length: int, size: int) -> None:
    if address < 0 or address + length > size:
        raise MemoryAccessError(
            f"cannot load {length} bytes at 0x{address:04X} into memory of size 0x{size:X}"
        )


class Ram(Memory):
    """Random-access memory initialised to zero."""

    def __init__(self, size: int) -> None:
        self._memory = bytearray(size)

    def read(self, address: int) -> int:
        _check_address(address, len(self._memory))
        return self._memory[address]

    def write(self, address: int, data: int) -> None:
        _check_address(address, len(self._memory))
        self._memory[address] = data

    def size(self) -> int:
        return len(self._memory)

    def load(self, address: int, contents: Iterable[int]) -> None:
        """Copy ``contents`` into memory starting at ``address``."""
        data = bytes(contents)
        _check_span(address, len(data), len(self._memory))
        self._memory[address : address + len(data)] = data


class Rom(Memory):
    """Read-only memory that can be loaded exactly once."""

    def __init__(self, size: int) -> None:
        self._memory = bytearray(size)
        self._write_count = 0

    def read(self, address: int) -> int:
        _check_address(address, len(self._memory))
        return self._memory[address]

    def write(self, address: int, data: int) -> None:
        raise MemoryAccessError(
            "ROM is a read-only memory and can't be written! "
            f"Attempted to write 0x{data:02X} to 0x{address:04X}"
        )

    def size(self) -> int:
        return len(self._memory)

    def load(self, address: int, contents: Iterable[int]) -> None:
        """Program the ROM; only the first call is allowed."""
        if self._write_count > 0:
            raise MemoryAccessError("ROM memory can be written only once")
        data = bytes(contents)
        _check_span(address, len(data), len(self._memory))
        self._memory[address : address + len(data)] = data
        self._write_count += 1


M = TypeVar("M", bound=Memory)


class MirroredMemory(Memory, Generic[M]):
    """A memory repeated ``mirrors`` extra times across the address space."""

    def __init__(self, memory: M, mirrors: int) -> None:
        self._memory = memory
        self._mirrors = mirrors

    def inner(self) -> M:
        """Return the wrapped memory."""
        return self._memory

    def read(self, address: int) -> int:
        return self._memory.read(address % self._memory.size())

    def write(self, address: int, data: int) -> None:
        self._memory.write(address % self._memory.size(), data)

    def size(self) -> int:
        return self._memory.size() * (self._mirrors + 1)

    def load(self, address: int, contents: Iterable[int]) -> None:
        """Load ``contents`` into the wrapped memory."""
        loader = getattr(self._memory, "load", None)
        if loader is None:
            raise MemoryAccessError("wrapped memory cannot be loaded")
        loader(address, contents)


class Mirroring(enum.Enum):
    """Nametable arrangement selected by the cartridge."""

    # vertical arrangement (CIRAM A10 = PPU A11)
    HORIZONTAL = "horizontal"
    # horizontal arrangement (CIRAM A10 = PPU A10)
    VERTICAL = "vertical"


class Ciram(Memory):
    """Nametable RAM: four logical cells backed by two physical ones."""

    def __init__(self, cell_size: int) -> None:
        self._memory = Ram(cell_size * 2)
        self._mirroring = Mirroring.HORIZONTAL
        self._cell_size = cell_size

    @property
    def mirroring(self) -> Mirroring:
        return self._mirroring

    def set_mirroring(self, mirroring: Mirroring) -> None:
        self._mirroring = mirroring

    def _offset(self, address: int) -> int:
        # Logical layout:   0 = $2000  1 = $2400
        #                   2 = $2800  3 = $2C00
        if not 0 <= address < 4 * self._cell_size:
            raise MemoryAccessError(f"Impossible CIRAM address {address}")
        cell = address // self._cell_size
        size = self._cell_size
        if self._mirroring is Mirroring.HORIZONTAL:
            # A A / B B
            return (0, size, size, 2 * size)[cell]
        # A B / A B
        return (0, 0, 2 * size, 2 * size)[cell]

    def read(self, address: int) -> int:
        return self._memory.read(address - self._offset(address))

    def write(self, address: int, data: int) -> None:
        self._memory.write(address - self._offset(address), data)

    def size(self) -> int:
        return self._cell_size * 4