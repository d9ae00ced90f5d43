"""
Song operations module.

Provides high-level functions an editor calls: documents built from the
configuration, and for a "Move Notes Sideways" prompt the options to
present, the remembered default, and the move itself.
"""

from typing import List, Optional, Tuple, Union

from music21 import stream

from bar_shift.config import Config
from bar_shift.core.commands import MoveNotesSideways
from bar_shift.core.document import SongDocument
from bar_shift.core.grid import Grid
from bar_shift.core.shift import OffsetInput, ShiftStrategy, snap_offset_beats
from bar_shift.core.song import Song


def move_notes_sideways(
    document: SongDocument,
    beats: OffsetInput,
    strategy: Union[ShiftStrategy, str, None] = None,
    config: Optional[Config] = None,
) -> bool:
    """
    Move every note in a document by a number of beats.

    Args:
        document: Document to modify
        beats: Beats to move (negative is left, positive is right)
        strategy: "overflow" or "wrapAround"; the remembered strategy if None
        config: Configuration holding the remembered strategy; when given,
            the strategy used is stored as the new default

    Returns:
        True if successful
    """
    shift_config = config.shift if config is not None else None
    command = MoveNotesSideways(document, shift_config)
    resolved = command.resolve_strategy(strategy)

    if config is not None:
        config.remember_strategy(resolved.value)

    return command.apply(beats, resolved)


def get_grid(config: Optional[Config] = None) -> Grid:
    """
    Get the grid for new songs.

    Returns:
        Grid built from the configured parts per beat and beats per bar
    """
    if config is None:
        return Grid()
    return Grid(config.grid.parts_per_beat, config.grid.beats_per_bar)


def create_document(
    config: Optional[Config] = None,
    bar_count: int = 1,
    channel_count: int = 1,
) -> SongDocument:
    """
    Create a document holding a new empty song.

    Args:
        config: Configuration supplying the grid and the undo limit
        bar_count: Number of empty bars
        channel_count: Number of channel tracks

    Returns:
        New SongDocument
    """
    song = Song.empty(get_grid(config), bar_count, channel_count)
    return _document_for(song, config)


def open_music21_score(m21_score: stream.Score, config: Optional[Config] = None) -> SongDocument:
    """
    Create a document from a music21 score.

    Offsets are quantized to the configured parts per beat; beats per bar
    come from the score's time signature.
    """
    song = Song.from_music21(m21_score, parts_per_beat=get_grid(config).parts_per_beat)
    return _document_for(song, config)


def _document_for(song: Song, config: Optional[Config]) -> SongDocument:
    if config is None:
        return SongDocument(song)
    return SongDocument(song, max_undo=config.history.max_undo)


def get_strategy_options() -> List[Tuple[str, str]]:
    """
    Get the strategies for a selector.

    Returns:
        List of (strategy_tag, display_name) tuples
    """
    return [(s.value, s.label) for s in ShiftStrategy]


def get_default_strategy(config: Optional[Config] = None) -> str:
    """
    Get the strategy tag to preselect.

    Returns:
        The remembered strategy, or "overflow" if none is stored or it is unknown
    """
    if config is not None and ShiftStrategy.from_value(config.shift.last_strategy):
        return config.shift.last_strategy
    return ShiftStrategy.OVERFLOW.value


def get_offset_range(grid: Grid) -> Tuple[int, int]:
    """
    Get the allowed beat offset range.

    Returns:
        Tuple of (min_beats, max_beats)
    """
    return (-grid.beats_per_bar, grid.beats_per_bar)


def validate_offset(value: OffsetInput, grid: Grid) -> float:
    """
    Sanitize a typed offset for display in the entry field.

    Returns:
        The offset as the field should show it after editing
    """
    return float(snap_offset_beats(value, grid))
