"""
BarShift - note timing shifts for bar-based songs.

Moves every note of a song sideways by a number of beats, either letting
notes overflow into neighbouring bars or wrapping them around within
their own bar, as a single undoable edit.
"""

__version__ = "1.0.0"

from bar_shift.core.song import Song
from bar_shift.core.document import SongDocument
from bar_shift.config import Config

__all__ = ["Song", "SongDocument", "Config", "__version__"]
