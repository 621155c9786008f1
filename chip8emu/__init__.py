from .cpu import Interpreter, RunState
from .decode import Instruction, Op, decode
from .display import Display
from .errors import (
    Chip8Error, Chip8Fault, ProgramLoadError,
    StackOverflowFault, StackUnderflowFault, UnknownOpcodeFault,
)
from .interfaces import Framebuffer, InputSource, ToneGenerator
from .keypad import Keypad
from .loader import read_rom
from .memory import Memory
from .sound import Tone

__version__ = "0.1.0"
