from . import config
from .interfaces import ToneGenerator


class Tone(ToneGenerator):
    """Silent tone generator that only remembers whether it should be beeping."""

    def __init__(self):
        self.playing = False
        self.frequency = None
        self.starts = 0

    def start(self, frequency=config.tone_hz):
        if self.playing:
            return
        self.playing = True
        self.frequency = frequency
        self.starts += 1
        config.log("Sound plays!")

    def stop(self):
        self.playing = False
