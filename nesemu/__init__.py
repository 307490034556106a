"""6502 CPU core, memory devices and CPU main bus for NES emulation."""

__version__ = "0.62.1"