# nesemu

`nesemu` is a pure Python NES emulator core. It contains:

- `nesemu.cpu.Cpu`, a 6502 CPU. It covers the legal opcode set, instruction
  timing, page-crossing penalties and NMI/RESET/IRQ interrupts
  (`nesemu.cpu.Interrupt`).
- `nesemu.bus.MainBus`, the CPU main bus. It has 2 kB of internal RAM, which is
  mirrored across `$0000-$1FFF`. You can attach other devices to it over
  `AddressRange`s.
- Memory devices in `nesemu.memory`:
  - `Ram`.
  - `Rom`, which can be loaded only once.
  - `MirroredMemory`.
  - `Ciram`, the nametable memory, with `Mirroring.HORIZONTAL` or
    `Mirroring.VERTICAL`.
- Building blocks:
  - the status register (`nesemu.status_register`);
  - the CPU register file (`nesemu.cpu_state.CpuState`);
  - the instruction functions (`nesemu.data_ops`, `nesemu.flow_ops`);
  - the opcode table (`nesemu.instruction_set.InstructionSet`);
  - bit helpers (`nesemu.utils`).

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Example

This example maps a program into `$8000-$FFFF` and points the reset vector at
it. The program multiplies the accumulator by ten.

```python
from nesemu.bus import AddressRange, MainBus
from nesemu.cpu import Cpu
from nesemu.memory import Ram

bus = MainBus()
program_memory = Ram(0x8000)
program_memory.load(0, bytes([
    0x0A,        # ASL A
    0x85, 0x10,  # STA $10
    0x0A,        # ASL A
    0x0A,        # ASL A
    0x18,        # CLC
    0x65, 0x10,  # ADC $10
]))
program_memory.load(0x7FFC, bytes([0x00, 0x80]))  # reset vector -> $8000
bus.attach("PRG", program_memory, AddressRange(0x8000, 0xFFFF))

cpu = Cpu(bus)
cpu.power_up()          # clears A, X, Y and jumps through the reset vector
cpu.state.acc = 4
for _ in range(6):
    cpu.execute()       # returns the clocks the instruction used

assert cpu.state.acc == 40
```

The bus answers `$0000-$1FFF` from its internal RAM, even when an attached
device's range also covers those addresses. This is why the program in the
example sits above that region.

`Cpu.clock()` moves the CPU forward one clock cycle. Each instruction runs in
one step, and the CPU then waits out the instruction's cycle count.
`Cpu.interrupt()` queues an interrupt, and the CPU serves it on the next clock.
If the interrupt-disable flag is set, the CPU ignores an IRQ.

## Errors

Errors are raised as exceptions:

- Bus errors are subclasses of `nesemu.bus.BusError`:
  - `MissingBusDeviceError`: no device covers the address.
  - `DeviceAlreadyAttachedError` and `DeviceOverlapError`: raised by
    `MainBus.attach`.
  - `BusReadError` and `BusWriteError`: a device failed during an access.
- Memory devices raise `nesemu.memory.MemoryAccessError` for out-of-range
  accesses. They also raise it for writes to a `Rom` and for a second
  `Rom.load`.
- An illegal opcode at PC raises `nesemu.cpu.InvalidInstructionError`.

## What it does not do

This package is only the CPU side. It has no:

- picture processing unit, graphics bus or palette handling;
- cartridge or ROM-file loading;
- controllers, audio or window for displaying frames;
- command-line program.

To run code, you attach memory to `MainBus` yourself and drive `Cpu` from your
own code.