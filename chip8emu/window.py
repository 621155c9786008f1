# We're subclassing pyglet (that'll handle graphics, sound output, and keyboard handling)
# and overriding whatever def we need from there. The interpreter itself never touches
# pyglet: the window hands it a Display, a Keypad and a PygletTone.

import sys

import numpy as np
import pyglet
from pyglet.media import synthesis
from pyglet.window import key

from . import config
from .cpu import Interpreter
from .display import Display
from .errors import Chip8Fault, ProgramLoadError
from .interfaces import ToneGenerator
from .keypad import Keypad
from .loader import read_rom

# Key mapping - maps physical keyboard keys to CHIP-8 keypad
KEYMAP = {
    key._1: 0x1, key._2: 0x2, key._3: 0x3, key._4: 0xC,
    key.Q: 0x4, key.W: 0x5, key.E: 0x6, key.R: 0xD,
    key.A: 0x7, key.S: 0x8, key.D: 0x9, key.F: 0xE,
    key.Z: 0xA, key.X: 0x0, key.C: 0xB, key.V: 0xF,
}


class PygletTone(ToneGenerator):
    """Looping square wave, started and stopped by the sound timer."""

    def __init__(self, duration=0.5, sample_rate=44100):
        self.duration = duration
        self.sample_rate = sample_rate
        self.player = None

    def start(self, frequency=config.tone_hz):
        if self.player is not None:
            return
        wave = synthesis.Square(duration=self.duration, frequency=frequency,
                                sample_rate=self.sample_rate)
        self.player = pyglet.media.Player()
        self.player.queue(pyglet.media.StaticSource(wave))
        self.player.loop = True
        self.player.play()

    def stop(self):
        if self.player is None:
            return
        self.player.pause()
        self.player.delete()
        self.player = None


class Chip8Window(pyglet.window.Window):
    def __init__(self, program, speed=config.speed):
        super().__init__(config.window_width, config.window_height,
                         caption="CHIP-8 Emulator", resizable=False)

        self.program = program
        self.display = Display()
        self.keypad = Keypad()
        self.tone = PygletTone()
        self.cpu = Interpreter(self.display, self.keypad, self.tone, speed=speed)
        self.cpu.load_program(program)

        # Pre-allocated small framebuffer (64x32 RGBA), upscaled with numpy.repeat
        self._small_framebuf = np.zeros((config.height, config.width, 4), dtype=np.uint8)
        self._small_framebuf[..., 3] = 255
        self.image = pyglet.image.ImageData(
            config.window_width,
            config.window_height,
            'RGBA',
            bytes(config.window_width * config.window_height * 4)
        )

        pyglet.clock.schedule_interval(self._frame_tick, 1.0 / config.frame_hz)

    # ---- Frame (60 Hz) ----
    def _frame_tick(self, dt):
        if self.has_exit:
            return
        try:
            self.cpu.run_one_frame()
        except Chip8Fault as e:
            print("Emulation error:", e)
            self.has_exit = True
            pyglet.clock.unschedule(self._frame_tick)
            self.close()

    # ---- Drawing ----
    def on_draw(self):
        self.clear()
        if self.display.should_draw:
            # pyglet's origin is bottom left, the CHIP-8 screen's is top left
            lit = self.display.pixels[::-1] * 255
            self._small_framebuf[..., :3] = lit[..., None]
            scaled = np.repeat(np.repeat(self._small_framebuf, config.scale, axis=0),
                               config.scale, axis=1)
            #updates existing image without creating new object
            self.image.set_data('RGBA', config.window_width * 4, scaled.tobytes())
            self.display.should_draw = False
        self.image.blit(0, 0)

    # ---- Input ----
    def on_key_press(self, symbol, modifiers):
        #@Override
        if symbol == key.ESCAPE:
            self.close()
        elif symbol == key.F1:
            config.set_logging(not config.logs_on)
            print("logs_on:", config.logs_on)
        elif symbol == key.BACKSPACE:
            self.cpu.reset()
            self.cpu.load_program(self.program)
        elif symbol in KEYMAP:
            self.keypad.press(KEYMAP[symbol])

    def on_key_release(self, symbol, modifiers):
        #@Override
        if symbol in KEYMAP:
            self.keypad.release(KEYMAP[symbol])

    def on_close(self):
        self.tone.stop()
        super().on_close()


# ---- Entry point ----
def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print("Usage: chip8emu <rom-file> [speed]")
        sys.exit(1)
    try:
        speed = int(argv[1]) if len(argv) > 1 else config.speed
    except ValueError:
        print("speed must be a number of instructions per frame, got", argv[1])
        sys.exit(1)

    try:
        Chip8Window(read_rom(argv[0]), speed=speed)
    except ProgramLoadError as e:
        print(e)
        sys.exit(1)
    pyglet.app.run()


if __name__ == "__main__":
    main()
