from pathlib import Path

from . import config
from .errors import ProgramLoadError


def read_rom(path):
    """Read a ROM image from disk, raising ProgramLoadError if there is nothing to run."""
    config.log("Loading ROM:", path)
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise ProgramLoadError("Unable to load rom %s: %s" % (path, e)) from e
    if not data:
        raise ProgramLoadError("Rom %s is empty" % path)
    return data
