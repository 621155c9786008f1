import numpy as np

from . import config
from .interfaces import Framebuffer


class Display(Framebuffer):
    """64x32 monochrome screen (array of pixels either on or off, 0 || 1).

    ``pixels`` is indexed [y, x]. ``should_draw`` is raised by present() and
    lowered by whoever renders it, so we only update the screen when needed.
    """

    def __init__(self, width=config.width, height=config.height):
        self.width = width
        self.height = height
        self.pixels = np.zeros((height, width), dtype=np.uint8)
        self.should_draw = True
        self.frames_presented = 0

    def clear(self):
        self.pixels[:] = 0
        config.log("Clear the display (all pixels turned off)")

    def toggle_pixel(self, x, y):
        # out of range coordinates wrap around to the other side
        x %= self.width
        y %= self.height
        self.pixels[y, x] ^= 1
        return not self.pixels[y, x]

    def present(self):
        self.should_draw = True
        self.frames_presented += 1

    def pixel(self, x, y):
        return int(self.pixels[y % self.height, x % self.width])

    def lit_count(self):
        return int(self.pixels.sum())
