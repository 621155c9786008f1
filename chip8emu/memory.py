from . import config
from .errors import ProgramLoadError
from .fonts import FONTSET

ADDRESS_MASK = 0xFFF


class Memory:
    """4KB of byte addressable memory.

    0x000-0x1FF belongs to the interpreter (the font set lives in the first
    80 bytes), programs are copied in from 0x200. Every access wraps to 12 bits.
    """

    def __init__(self):
        self.data = bytearray(config.memory_size)

    def read(self, address):
        return self.data[address & ADDRESS_MASK]

    def write(self, address, value):
        self.data[address & ADDRESS_MASK] = value & 0xFF

    def read_block(self, address, length):
        return bytes(self.data[(address + i) & ADDRESS_MASK] for i in range(length))

    def clear(self):
        self.data[:] = bytes(len(self.data))

    def load_fonts(self):
        self.data[:len(FONTSET)] = bytes(FONTSET)

    def load_program(self, program):
        program = bytes(program)
        room = len(self.data) - config.program_start
        if not program:
            raise ProgramLoadError("Program is empty")
        if len(program) > room:
            raise ProgramLoadError(
                "Program is %d bytes, only %d fit above 0x%03X"
                % (len(program), room, config.program_start))
        start = config.program_start
        self.data[start:start + len(program)] = program
        config.log("Loaded %d bytes at 0x%03X" % (len(program), start))
        return len(program)
