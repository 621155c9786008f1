"""The three things the interpreter talks to besides its own memory."""

from abc import ABC, abstractmethod


class Framebuffer(ABC):
    @abstractmethod
    def clear(self):
        """Turn every pixel off."""

    @abstractmethod
    def toggle_pixel(self, x, y):
        """XOR one pixel. Return True if the pixel is now off (a collision)."""

    @abstractmethod
    def present(self):
        """Flush the current contents to the output, once per frame."""


class InputSource(ABC):
    @abstractmethod
    def is_pressed(self, key):
        """Whether logical key 0x0..0xF is currently held."""

    @abstractmethod
    def register_next_key_callback(self, callback):
        """Call ``callback(key)`` on the next key press, then forget it."""


class ToneGenerator(ABC):
    @abstractmethod
    def start(self, frequency):
        """Start the tone. Calling it again while playing does nothing."""

    @abstractmethod
    def stop(self):
        """Stop the tone. Calling it while silent does nothing."""
