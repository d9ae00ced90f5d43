"""
Core module for BarShift.

Contains the grid and song models, the note shift transform, and the
undoable command that applies it to a song document.
"""

from bar_shift.core.grid import Grid, GridConfigurationError
from bar_shift.core.song import Bar, Note, Song, SongState
from bar_shift.core.shift import (
    ShiftResult,
    ShiftStrategy,
    offset_to_parts,
    shift_notes,
    shift_song,
    snap_offset_beats,
)
from bar_shift.core.history import Change, UndoHistory
from bar_shift.core.document import SnapshotChange, SongDocument
from bar_shift.core.commands import MoveNotesSideways
from bar_shift.core.operations import (
    create_document,
    get_grid,
    open_music21_score,
    get_default_strategy,
    get_offset_range,
    get_strategy_options,
    move_notes_sideways,
    validate_offset,
)

__all__ = [
    "Grid",
    "GridConfigurationError",
    "Bar",
    "Note",
    "Song",
    "SongState",
    "ShiftResult",
    "ShiftStrategy",
    "offset_to_parts",
    "shift_notes",
    "shift_song",
    "snap_offset_beats",
    "Change",
    "UndoHistory",
    "SnapshotChange",
    "SongDocument",
    "MoveNotesSideways",
    "create_document",
    "get_grid",
    "open_music21_score",
    "get_default_strategy",
    "get_offset_range",
    "get_strategy_options",
    "move_notes_sideways",
    "validate_offset",
]
