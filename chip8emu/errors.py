class Chip8Error(Exception):
    """Base class for everything the emulator raises on purpose."""


class ProgramLoadError(Chip8Error):
    """The ROM could not be read, was empty, or does not fit in memory.

    Raised before anything executes, so interpreter state is untouched.
    """


class Chip8Fault(Chip8Error):
    """Fatal execution error. ``pc`` is the address of the faulting instruction."""

    reason = "Execution fault"

    def __init__(self, opcode, pc):
        self.opcode = opcode
        self.pc = pc
        super().__init__("%s: %04X at 0x%03X" % (self.reason, opcode, pc))


class UnknownOpcodeFault(Chip8Fault):
    reason = "Unknown opcode"


class StackOverflowFault(Chip8Fault):
    reason = "Stack overflow on CALL"


class StackUnderflowFault(Chip8Fault):
    reason = "Stack underflow on RET"
