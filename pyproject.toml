[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nesemu"
version = "0.62.1"
description = "A 6502 CPU core, memory devices and main bus for NES emulation"
requires-python = ">=3.10"
dependencies = []
keywords = ["nes", "6502", "emulator", "cpu", "bus"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["nesemu"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
