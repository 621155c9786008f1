# CHIP8 Virtual Machine Steps:
# Input - key input states are owned by the InputSource and checked per instruction.
# Output - 64x32 display (Framebuffer) & sound buzzer (ToneGenerator).
# CPU - Cogwoods CHIP8 Technical reference http://devernay.free.fr/hacks/chip8/C8TECH10.HTM#0.0
# Memory - can hold up to 4096 bytes which includes: the interpreter, fonts, and inputted ROM.
#----------------------------------------------------------------------------------------------
# 16 eight bit registers, two timers that we decrement once per frame and a stack of
# return addresses limited to 16 entries. run_one_frame() executes `speed` instructions
# and is meant to be called 60 times a second by whatever drives the emulator.
#----------------------------------------------------------------------------------------------

import random
import threading
from enum import Enum

from . import config
from .decode import Op, decode
from .errors import Chip8Fault, StackOverflowFault, StackUnderflowFault
from .fonts import glyph_address
from .loader import read_rom
from .memory import ADDRESS_MASK, Memory


class RunState(Enum):
    RUNNING = "running"
    WAITING_FOR_KEY = "waiting for key"
    HALTED = "halted"


class Interpreter:
    """The CHIP-8 CPU.

    Owns memory, registers, stack, timers and the program counter and drives
    a Framebuffer, an InputSource and a ToneGenerator passed in by the caller.
    """

    def __init__(self, framebuffer, keypad, tone, speed=config.speed, rng=None):
        self.framebuffer = framebuffer
        self.keypad = keypad
        self.tone = tone
        self.speed = speed
        self.rng = rng or random.Random()
        self.lock = threading.RLock()

        self.memory = Memory()
        self.setup_funcmap()
        self._power_on()

    def _power_on(self):
        # ---- CPU state ----
        self.memory.clear()
        self.memory.load_fonts()
        self.V = [0] * 16       # 16 general-purpose registers
        self.I = 0              # index register (memory pointer)
        self.pc = config.program_start
        self.stack = []
        self.delay_timer = 0
        self.sound_timer = 0
        self.run_state = RunState.RUNNING
        self.key_register = None  # Vx that Fx0A is waiting to fill
        self.fault = None

    def reset(self):
        with self.lock:
            self._power_on()
            self.framebuffer.clear()
            self.tone.stop()

    # ---- Load ROM ----
    def load_program(self, program):
        with self.lock:
            return self.memory.load_program(program)

    def load_rom(self, path):
        return self.load_program(read_rom(path))

    @property
    def paused(self):
        return self.run_state is RunState.WAITING_FOR_KEY

    @property
    def halted(self):
        return self.run_state is RunState.HALTED

    def state(self):
        return {
            "pc": self.pc,
            "I": self.I,
            "V": list(self.V),
            "stack": list(self.stack),
            "delay_timer": self.delay_timer,
            "sound_timer": self.sound_timer,
            "run_state": self.run_state.value,
            "key_register": self.key_register,
        }

    # ---- Frame ----
    def run_one_frame(self):
        with self.lock:
            if self.run_state is not RunState.RUNNING:
                return

            for _ in range(self.speed):
                try:
                    self.step()
                except Chip8Fault as e:
                    self.run_state = RunState.HALTED
                    self.fault = e
                    config.log("Emulation halted:", e)
                    raise
                # Fx0A blocks the rest of the frame, timers and output included
                if self.paused:
                    return

            self.update_timers()
            self.play_sound()
            self.framebuffer.present()

    def update_timers(self):
        # Timers decrement by 1 at 60hz
        if self.delay_timer > 0:
            self.delay_timer -= 1
        if self.sound_timer > 0:
            self.sound_timer -= 1

    def play_sound(self):
        if self.sound_timer > 0:
            self.tone.start(config.tone_hz)
        else:
            self.tone.stop()

    # ---- Input ----
    def key_pressed(self, key):
        """One-shot callback handed to the keypad by Fx0A."""
        with self.lock:
            if not self.paused:
                return
            self.V[self.key_register] = key & 0xF
            log_register = self.key_register
            self.key_register = None
            self.run_state = RunState.RUNNING
            config.log(f"Key {key:X} pressed, stored in V{log_register:X}")

    # ---- Cycle ----
    def fetch(self):
        return (self.memory.read(self.pc) << 8) | self.memory.read(self.pc + 1)

    def step(self):
        address = self.pc
        opcode = self.fetch()
        # advance before dispatch so jumps and calls are not double-advanced
        self.pc = (self.pc + 2) & ADDRESS_MASK
        ins = decode(opcode, address)
        self.funcmap[ins.op](ins)

    # ---- Opcode function map ----
    def setup_funcmap(self):
        self.funcmap = {
            Op.SYS: self._0nnn,          # 0nnn - SYS call, ignored
            Op.CLS: self._00E0,          # 00E0 - Clear the display
            Op.RET: self._00EE,          # 00EE - Return from a subroutine
            Op.JP: self._1nnn,           # 1nnn - Jump to a specific memory address
            Op.CALL: self._2nnn,         # 2nnn - Call a subroutine at a memory address
            Op.SE_VX_BYTE: self._3xkk,   # 3xkk - Skip next instruction if Vx == kk
            Op.SNE_VX_BYTE: self._4xkk,  # 4xkk - Skip next instruction if Vx != kk
            Op.SE_VX_VY: self._5xy0,     # 5xy0 - Skip next instruction if Vx == Vy
            Op.LD_VX_BYTE: self._6xkk,   # 6xkk - Set Vx = kk
            Op.ADD_VX_BYTE: self._7xkk,  # 7xkk - Add kk to Vx, no carry
            Op.LD_VX_VY: self._8xy0,     # 8xy0..8xyE - Math and logic between two registers
            Op.OR: self._8xy1,
            Op.AND: self._8xy2,
            Op.XOR: self._8xy3,
            Op.ADD: self._8xy4,
            Op.SUB: self._8xy5,
            Op.SHR: self._8xy6,
            Op.SUBN: self._8xy7,
            Op.SHL: self._8xyE,
            Op.SNE_VX_VY: self._9xy0,    # 9xy0 - Skip next instruction if Vx != Vy
            Op.LD_I: self._Annn,         # Annn - Set I = nnn
            Op.JP_V0: self._Bnnn,        # Bnnn - Jump to nnn + V0
            Op.RND: self._Cxkk,          # Cxkk - Vx = random byte AND kk
            Op.DRW: self._Dxyn,          # Dxyn - Draw a sprite at (Vx, Vy)
            Op.SKP: self._Ex9E,          # Ex9E - Skip if key Vx is pressed
            Op.SKNP: self._ExA1,         # ExA1 - Skip if key Vx is not pressed
            Op.LD_VX_DT: self._Fx07,     # Fx07..Fx65 - timers, memory, I, and key input
            Op.LD_VX_K: self._Fx0A,
            Op.LD_DT_VX: self._Fx15,
            Op.LD_ST_VX: self._Fx18,
            Op.ADD_I_VX: self._Fx1E,
            Op.LD_F_VX: self._Fx29,
            Op.LD_B_VX: self._Fx33,
            Op.LD_MEM_VX: self._Fx55,
            Op.LD_VX_MEM: self._Fx65,
        }

    def _skip(self):
        self.pc = (self.pc + 2) & ADDRESS_MASK

    # ---- Opcode Handlers ----

    # 0nnn - SYS call, ignored on modern interpreters
    def _0nnn(self, ins):
        config.log(f"SYS call ignored ({ins.opcode:04X})")

    # 00E0 - CLS
    def _00E0(self, ins):
        self.framebuffer.clear()

    # 00EE - RET
    def _00EE(self, ins):
        if not self.stack:
            raise StackUnderflowFault(ins.opcode, (self.pc - 2) & ADDRESS_MASK)
        self.pc = self.stack.pop()
        config.log("Return to", hex(self.pc))

    # 1nnn - Jump to address nnn
    def _1nnn(self, ins):
        self.pc = ins.nnn
        config.log("Jump to address", hex(ins.nnn))

    # 2nnn - Call subroutine at nnn
    def _2nnn(self, ins):
        if len(self.stack) >= config.stack_depth:
            raise StackOverflowFault(ins.opcode, (self.pc - 2) & ADDRESS_MASK)
        self.stack.append(self.pc)
        self.pc = ins.nnn
        config.log("Call subroutine at", hex(ins.nnn))

    # 3xkk - Skip next instruction if Vx == kk
    def _3xkk(self, ins):
        if self.V[ins.x] == ins.kk:
            self._skip()

    # 4xkk - Skip next instruction if Vx != kk
    def _4xkk(self, ins):
        if self.V[ins.x] != ins.kk:
            self._skip()

    # 5xy0 - Skip next instruction if Vx == Vy
    def _5xy0(self, ins):
        if self.V[ins.x] == self.V[ins.y]:
            self._skip()

    # 6xkk - Set Vx = kk
    def _6xkk(self, ins):
        self.V[ins.x] = ins.kk
        config.log(f"Set V{ins.x:X} = {ins.kk}")

    # 7xkk - Add immediate, VF untouched
    def _7xkk(self, ins):
        self.V[ins.x] = (self.V[ins.x] + ins.kk) & 0xFF

    # 8xy0 - Copy Vy into Vx
    def _8xy0(self, ins):
        self.V[ins.x] = self.V[ins.y]

    def _8xy1(self, ins):
        self.V[ins.x] |= self.V[ins.y]

    def _8xy2(self, ins):
        self.V[ins.x] &= self.V[ins.y]

    def _8xy3(self, ins):
        self.V[ins.x] ^= self.V[ins.y]

    # The flag goes in first and the result last, so 8Fy_ leaves the result in VF.

    # 8xy4 - ADD with carry
    def _8xy4(self, ins):
        total = self.V[ins.x] + self.V[ins.y]
        self.V[0xF] = 1 if total > 0xFF else 0
        self.V[ins.x] = total & 0xFF

    # 8xy5 - SUB, VF = NOT borrow
    def _8xy5(self, ins):
        vx, vy = self.V[ins.x], self.V[ins.y]
        self.V[0xF] = 1 if vx > vy else 0
        self.V[ins.x] = (vx - vy) & 0xFF

    # 8xy6 - SHR, VF = least significant bit
    def _8xy6(self, ins):
        vx = self.V[ins.x]
        self.V[0xF] = vx & 0x1
        self.V[ins.x] = vx >> 1

    # 8xy7 - SUBN, Vx = Vy - Vx
    def _8xy7(self, ins):
        vx, vy = self.V[ins.x], self.V[ins.y]
        self.V[0xF] = 1 if vy > vx else 0
        self.V[ins.x] = (vy - vx) & 0xFF

    # 8xyE - SHL, VF = most significant bit as a mask (0x00 or 0x80)
    def _8xyE(self, ins):
        vx = self.V[ins.x]
        self.V[0xF] = vx & 0x80
        self.V[ins.x] = (vx << 1) & 0xFF

    # 9xy0 - Skip next instruction if Vx != Vy
    def _9xy0(self, ins):
        if self.V[ins.x] != self.V[ins.y]:
            self._skip()

    # Annn - Set I = nnn
    def _Annn(self, ins):
        self.I = ins.nnn
        config.log(f"Set I = {self.I:03X}")

    # Bnnn - Jump to address nnn + V0
    def _Bnnn(self, ins):
        self.pc = (ins.nnn + self.V[0]) & ADDRESS_MASK
        config.log(f"Jump to address V0 + {ins.nnn:03X} = {self.pc:03X}")

    # Cxkk - RND Vx, byte
    def _Cxkk(self, ins):
        self.V[ins.x] = self.rng.randint(0, 255) & ins.kk

    # Dxyn - DRW Vx, Vy, nibble
    def _Dxyn(self, ins):
        px = self.V[ins.x]
        py = self.V[ins.y]
        collision = False
        for row, sprite in enumerate(self.memory.read_block(self.I, ins.n)):
            for bit in range(8):
                if sprite & (0x80 >> bit):
                    if self.framebuffer.toggle_pixel((px + bit) % config.width,
                                                     (py + row) % config.height):
                        collision = True
        self.V[0xF] = 1 if collision else 0
        config.log(f"Drew sprite, collision={self.V[0xF]}")

    # Ex9E - SKP Vx
    def _Ex9E(self, ins):
        if self.keypad.is_pressed(self.V[ins.x]):
            self._skip()

    # ExA1 - SKNP Vx
    def _ExA1(self, ins):
        if not self.keypad.is_pressed(self.V[ins.x]):
            self._skip()

    # Fx07 - Vx = delay timer
    def _Fx07(self, ins):
        self.V[ins.x] = self.delay_timer

    # Fx0A - LD Vx, K: stall everything until key_pressed() fills Vx
    def _Fx0A(self, ins):
        self.run_state = RunState.WAITING_FOR_KEY
        self.key_register = ins.x
        self.keypad.register_next_key_callback(self.key_pressed)
        config.log(f"Waiting for a key press into V{ins.x:X}")

    def _Fx15(self, ins):
        self.delay_timer = self.V[ins.x]

    def _Fx18(self, ins):
        self.sound_timer = self.V[ins.x]

    # Fx1E - ADD I, Vx, VF untouched
    def _Fx1E(self, ins):
        self.I = (self.I + self.V[ins.x]) & 0xFFFF

    # Fx29 - point I at the font glyph for the digit in Vx
    def _Fx29(self, ins):
        self.I = glyph_address(self.V[ins.x])

    # Fx33 - BCD of Vx into I, I+1, I+2
    def _Fx33(self, ins):
        value = self.V[ins.x]
        self.memory.write(self.I, value // 100)
        self.memory.write(self.I + 1, (value // 10) % 10)
        self.memory.write(self.I + 2, value % 10)

    # Fx55 - store V0..Vx at I
    def _Fx55(self, ins):
        for i in range(ins.x + 1):
            self.memory.write(self.I + i, self.V[i])

    # Fx65 - load V0..Vx from I
    def _Fx65(self, ins):
        for i in range(ins.x + 1):
            self.V[i] = self.memory.read(self.I + i)
