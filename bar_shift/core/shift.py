"""
Shift transform - move every note sideways by a number of beats.

Notes that cross a bar boundary are handled by a ShiftStrategy:

    OVERFLOW     Notes move into neighbouring bars. Bars are added at the
                 front or the back of the song when notes leave it.
    WRAP_AROUND  Notes stay in their bar and re-enter from the opposite
                 side. The bar count never changes. A note that wraps
                 past the end of the bar is cut off at the bar end.

Everything here is pure: the input bars are never modified.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from fractions import Fraction
from numbers import Real
from typing import List, Optional, Tuple, Union
import logging

from bar_shift.core.grid import Grid, round_half_up
from bar_shift.core.song import Bar, Note, Song

logger = logging.getLogger(__name__)

OffsetInput = Union[int, float, Fraction, Decimal, str]


class ShiftStrategy(Enum):
    """How notes crossing a bar boundary are placed."""
    OVERFLOW = "overflow"
    WRAP_AROUND = "wrapAround"

    @classmethod
    def from_value(cls, value: str) -> Optional["ShiftStrategy"]:
        """Get a strategy from its tag, or None if the tag is unknown."""
        for strategy in cls:
            if strategy.value == value:
                return strategy
        return None

    @property
    def label(self) -> str:
        """Human readable description for selectors."""
        labels = {
            ShiftStrategy.OVERFLOW: "Overflow notes across bars.",
            ShiftStrategy.WRAP_AROUND: "Wrap notes around within bars.",
        }
        return labels[self]


@dataclass
class ShiftResult:
    """New bars produced by a shift, plus how many bars were added."""

    bars: List[Bar]
    bars_added_front: int = 0
    bars_added_back: int = 0

    @property
    def bar_count_changed(self) -> bool:
        return self.bars_added_front > 0 or self.bars_added_back > 0


def _parse_offset(value: OffsetInput) -> Optional[Union[Real, Decimal]]:
    """Numeric value of a typed offset, or None if it is not a number (or NaN)."""
    if isinstance(value, str):
        text = value.strip()
        try:
            value = Fraction(text) if "/" in text else Decimal(text)
        except (InvalidOperation, ValueError, ZeroDivisionError):
            return None
    if isinstance(value, Decimal):
        return None if value.is_nan() else value
    if isinstance(value, Real):
        return None if value != value else value
    return None


def snap_offset_beats(value: OffsetInput, grid: Grid) -> Fraction:
    """
    Sanitize a beat offset the same way the offset entry field does.

    The value is rounded to the nearest part, then to two decimal places
    of a beat, then clamped to one bar either way. Ties round up.
    Non-numeric input gives 0; infinities clamp to the bar bounds.

    Values outside the bar bounds, or too small to reach half a part, are
    settled by comparison alone, so text like "1e999999999" never becomes
    an exact fraction.

    Args:
        value: Offset in beats, as a number or the text typed by the user
        grid: Grid the offset applies to

    Returns:
        Sanitized offset in beats
    """
    limit = grid.beats_per_bar
    beats = _parse_offset(value)
    if beats is None:
        logger.warning(f"Ignoring non-numeric beat offset {value!r}")
        return Fraction(0)

    # Both bounds lie on the part grid and on the hundredths grid.
    if beats >= limit:
        return Fraction(limit)
    if beats <= -limit:
        return Fraction(-limit)
    if abs(beats) * 2 * grid.parts_per_beat < 1:
        return Fraction(0)

    beats = Fraction(beats)
    beats = Fraction(round_half_up(beats * grid.parts_per_beat), grid.parts_per_beat)
    beats = Fraction(round_half_up(beats * 100), 100)
    return max(Fraction(-limit), min(Fraction(limit), beats))


def offset_to_parts(value: OffsetInput, grid: Grid) -> int:
    """Sanitize a beat offset and convert it to a whole number of parts."""
    return grid.beats_to_parts(snap_offset_beats(value, grid))


def _copy_bars(bars: List[Bar]) -> List[Bar]:
    # Notes are immutable, so copying the track lists is enough.
    return [Bar([list(track) for track in bar.channels]) for bar in bars]


def _shift_overflow(bars: List[Bar], grid: Grid, offset_parts: int) -> ShiftResult:
    placements: List[Tuple[int, int, Note]] = []
    for bar_index, bar in enumerate(bars):
        for channel, track in enumerate(bar.channels):
            for n in track:
                start = grid.to_absolute(bar_index, n.start) + offset_parts
                end = grid.to_absolute(bar_index, n.end) + offset_parts
                new_bar, new_start = grid.to_bar_relative(start)
                new_end = end - grid.to_absolute(new_bar, 0)
                placements.append((new_bar, channel, n.moved(new_start, new_end)))

    if not placements:
        return ShiftResult(_copy_bars(bars))

    lowest = min(p[0] for p in placements)
    highest = max(p[0] for p in placements)
    added_front = max(0, -lowest)
    bar_count = max(len(bars), highest + 1) + added_front
    added_back = bar_count - len(bars) - added_front

    channel_count = bars[0].channel_count
    new_bars = [Bar.empty(channel_count) for _ in range(bar_count)]
    for bar_index, channel, n in placements:
        new_bars[bar_index + added_front].channels[channel].append(n)

    return ShiftResult(new_bars, added_front, added_back)


def _shift_wrap_around(bars: List[Bar], grid: Grid, offset_parts: int) -> ShiftResult:
    parts_per_bar = grid.parts_per_bar
    if offset_parts % parts_per_bar == 0:
        return ShiftResult(_copy_bars(bars))

    new_bars = []
    for bar in bars:
        channels = []
        for track in bar.channels:
            moved = []
            for n in track:
                start = (n.start + offset_parts) % parts_per_bar
                end = min(start + n.duration, parts_per_bar)
                if end > start:
                    moved.append(n.moved(start, end))
            channels.append(moved)
        new_bars.append(Bar(channels))

    return ShiftResult(new_bars)


def shift_notes(
    bars: List[Bar],
    grid: Grid,
    offset_parts: int,
    strategy: ShiftStrategy = ShiftStrategy.OVERFLOW,
) -> ShiftResult:
    """
    Move every note in ``bars`` by ``offset_parts`` parts.

    Note durations are preserved, except that WRAP_AROUND cuts a note off
    at the end of its bar when it would run past it. OVERFLOW never drops
    a note and never removes bars.

    Args:
        bars: Current bars (not modified)
        grid: Grid the bars are laid out on
        offset_parts: Signed offset in parts
        strategy: How to handle notes crossing bar boundaries

    Returns:
        ShiftResult with the new bars and the number of bars added
    """
    if offset_parts == 0 or not bars:
        return ShiftResult(_copy_bars(bars))

    if strategy is ShiftStrategy.WRAP_AROUND:
        result = _shift_wrap_around(bars, grid, offset_parts)
    else:
        result = _shift_overflow(bars, grid, offset_parts)

    for bar in result.bars:
        bar.sort()

    logger.debug(
        f"Shifted {len(bars)} bars by {offset_parts} parts ({strategy.value}), "
        f"added {result.bars_added_front} front / {result.bars_added_back} back"
    )
    return result


def shift_song(
    song: Song,
    offset_beats: OffsetInput,
    strategy: ShiftStrategy = ShiftStrategy.OVERFLOW,
) -> ShiftResult:
    """
    Compute the bars of ``song`` shifted by a beat offset.

    The offset is sanitized with snap_offset_beats first. The song itself
    is left unchanged.
    """
    offset_parts = offset_to_parts(offset_beats, song.grid)
    return shift_notes(song.bars, song.grid, offset_parts, strategy)
