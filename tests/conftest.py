import pytest

from chip8emu import config
from chip8emu.cpu import Interpreter
from chip8emu.display import Display
from chip8emu.keypad import Keypad
from chip8emu.sound import Tone


class FixedRandom:
    """Stands in for random.Random so Cxkk is predictable."""

    def __init__(self, value):
        self.value = value

    def randint(self, a, b):
        return self.value


@pytest.fixture
def cpu():
    return Interpreter(Display(), Keypad(), Tone())


@pytest.fixture
def load(cpu):
    """Write opcodes big-endian into memory, starting at 0x200 unless told otherwise."""
    def _load(*opcodes, at=config.program_start):
        for i, opcode in enumerate(opcodes):
            cpu.memory.write(at + 2 * i, opcode >> 8)
            cpu.memory.write(at + 2 * i + 1, opcode & 0xFF)
    return _load


@pytest.fixture
def fixed_random():
    return FixedRandom
