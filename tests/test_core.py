"""
Tests for BarShift core functionality.
"""

import json

import pytest


class TestNote:
    """Tests for the Note value type."""

    def test_duration(self):
        """Test note duration in parts."""
        from bar_shift.core.song import Note

        assert Note(4, 10).duration == 6

    def test_invalid_note(self):
        """Test that invalid positions are rejected."""
        from bar_shift.core.song import Note

        with pytest.raises(ValueError):
            Note(-1, 4)
        with pytest.raises(ValueError):
            Note(4, 4)

    def test_pitch_names(self):
        """Test pitch names from MIDI numbers."""
        from bar_shift.core.song import Note

        assert Note(0, 4, (60, 69)).pitch_names == ["C4", "A4"]

    def test_moved_keeps_payload(self):
        """Test that moving a note keeps its pitches."""
        from bar_shift.core.song import Note

        moved = Note(0, 4, (62,)).moved(8, 12)
        assert (moved.start, moved.end, moved.pitches) == (8, 12, (62,))


class TestSong:
    """Tests for the Song class."""

    def test_song_creation(self):
        """Test creating an empty song."""
        from bar_shift.core.song import Song

        song = Song()
        assert song.bar_count == 1
        assert song.channel_count == 1
        assert song.note_count == 0
        assert song.loop_start == 0
        assert song.loop_length == 1

    def test_empty_song(self):
        """Test creating a song of empty bars."""
        from bar_shift.core.grid import Grid
        from bar_shift.core.song import Song

        song = Song.empty(Grid(4, 4), bar_count=3, channel_count=2)
        assert song.bar_count == 3
        assert all(bar.channel_count == 2 for bar in song.bars)
        assert all(bar.is_empty for bar in song.bars)

    def test_mismatched_channels(self):
        """Test that bars must share a channel count."""
        from bar_shift.core.song import Bar, Song

        with pytest.raises(ValueError):
            Song(bars=[Bar.empty(1), Bar.empty(2)])

    def test_loop_clamped(self):
        """Test that the loop region stays inside the song."""
        from bar_shift.core.song import Song

        song = Song.empty(bar_count=2)
        song.loop_start = 5
        song.loop_length = 10
        song.clamp_loop()
        assert song.loop_start == 1
        assert song.loop_length == 1

    def test_notes_in_song_order(self):
        """Test listing a channel's notes with their bars."""
        from bar_shift.core.song import Bar, Note, Song

        song = Song(bars=[Bar([[Note(0, 4)]]), Bar([[Note(2, 6), Note(8, 9)]])])
        assert [(b, n.start) for b, n in song.notes(0)] == [(0, 0), (1, 2), (1, 8)]
        assert song.note_count == 3

    def test_snapshot_restore(self):
        """Test that snapshots are independent of later edits."""
        from bar_shift.core.song import Bar, Note, Song

        song = Song(bars=[Bar([[Note(0, 4)]])])
        state = song.snapshot()

        song.bars[0].channels[0].clear()
        song.bars.append(Bar.empty(1))
        assert song.note_count == 0

        song.restore(state)
        assert song.bar_count == 1
        assert song.note_count == 1
        assert state.bars[0].channels[0][0].start == 0


class TestMusic21:
    """Tests for music21 conversion."""

    def test_from_music21(self):
        """Test creating a song from music21 objects."""
        from bar_shift.core.song import Song
        from music21 import stream, note

        m21_score = stream.Score()
        part = stream.Part()
        measure = stream.Measure(number=1)
        measure.append(note.Note("C4", quarterLength=1.0))
        measure.append(note.Note("D4", quarterLength=1.0))
        measure.append(note.Note("E4", quarterLength=1.0))
        measure.append(note.Note("F4", quarterLength=1.0))
        part.append(measure)
        m21_score.append(part)

        song = Song.from_music21(m21_score, parts_per_beat=4)

        assert song.grid.beats_per_bar == 4
        assert song.bar_count == 1
        assert song.channel_count == 1
        track = song.bars[0].channels[0]
        assert [(n.start, n.end) for n in track] == [(0, 4), (4, 8), (8, 12), (12, 16)]
        assert [n.pitches for n in track] == [(60,), (62,), (64,), (65,)]

    def test_rests_skipped(self):
        """Test that rests do not become notes."""
        from bar_shift.core.song import Song
        from music21 import stream, note, meter

        m21_score = stream.Score()
        part = stream.Part()
        measure = stream.Measure(number=1)
        measure.append(meter.TimeSignature("3/4"))
        measure.append(note.Rest(quarterLength=1.0))
        measure.append(note.Note("G4", quarterLength=2.0))
        part.append(measure)
        m21_score.append(part)

        song = Song.from_music21(m21_score, parts_per_beat=2)

        assert song.grid.beats_per_bar == 3
        assert [(n.start, n.end) for n in song.bars[0].channels[0]] == [(2, 6)]

    def test_to_music21(self):
        """Test exporting a shifted song to music21 and reading it back."""
        from bar_shift.core.grid import Grid
        from bar_shift.core.song import Bar, Note, Song

        song = Song(Grid(4, 4), [
            Bar([[Note(0, 4, (60,)), Note(8, 16, (60, 64, 67))]]),
            Bar([[Note(4, 6, (72,))]]),
        ])

        m21_score = song.to_music21()
        assert len(m21_score.parts) == 1
        assert len(list(m21_score.recurse().getElementsByClass("Chord"))) == 1

        again = Song.from_music21(m21_score, parts_per_beat=4)
        assert again.bar_count == 2
        first, chord_note = again.bars[0].channels[0]
        assert (first.start, first.end, first.pitches) == (0, 4, (60,))
        assert sorted(chord_note.pitches) == [60, 64, 67]
        assert [(n.start, n.end) for n in again.bars[1].channels[0]] == [(4, 6)]


class TestConfig:
    """Tests for configuration."""

    def test_config_creation(self, tmp_path):
        """Test creating a config."""
        from bar_shift.config import Config

        config = Config(config_dir=tmp_path)
        assert config.grid.parts_per_beat == 24
        assert config.grid.beats_per_bar == 8
        assert config.shift.last_strategy == "overflow"
        assert config.history.max_undo == 50

    def test_config_save_load(self, tmp_path):
        """Test saving and loading config."""
        from bar_shift.config import Config, STRATEGY_KEY

        config = Config(config_dir=tmp_path)
        config.grid.beats_per_bar = 4
        config.remember_strategy("wrapAround")

        data = json.loads(config.config_file.read_text())
        assert data[STRATEGY_KEY] == "wrapAround"

        loaded = Config.load(tmp_path)
        assert loaded.grid.beats_per_bar == 4
        assert loaded.shift.last_strategy == "wrapAround"

    def test_corrupt_config(self, tmp_path):
        """Test that an unreadable config file gives defaults."""
        from bar_shift.config import Config

        (tmp_path / "config.json").write_text("{not json")

        config = Config.load(tmp_path)
        assert config.shift.last_strategy == "overflow"


class TestOperations:
    """Tests for song operations."""

    def test_get_strategy_options(self):
        """Test getting strategy options."""
        from bar_shift.core.operations import get_strategy_options

        options = get_strategy_options()
        assert options == [
            ("overflow", "Overflow notes across bars."),
            ("wrapAround", "Wrap notes around within bars."),
        ]

    def test_get_default_strategy(self, tmp_path):
        """Test the preselected strategy."""
        from bar_shift.config import Config
        from bar_shift.core.operations import get_default_strategy

        assert get_default_strategy() == "overflow"

        config = Config(config_dir=tmp_path)
        config.shift.last_strategy = "wrapAround"
        assert get_default_strategy(config) == "wrapAround"

        config.shift.last_strategy = "bogus"
        assert get_default_strategy(config) == "overflow"

    def test_offset_range(self):
        """Test the offset range is one bar either way."""
        from bar_shift.core.grid import Grid
        from bar_shift.core.operations import get_offset_range, validate_offset

        grid = Grid(4, 4)
        assert get_offset_range(grid) == (-4, 4)
        assert validate_offset("6", grid) == 4.0
        assert validate_offset("1.13", grid) == 1.25

    def test_create_document_from_config(self, tmp_path):
        """Test that new documents use the configured grid and undo limit."""
        from bar_shift.config import Config
        from bar_shift.core.operations import create_document, move_notes_sideways
        from bar_shift.core.song import Note

        config = Config(config_dir=tmp_path)
        config.grid.parts_per_beat = 4
        config.grid.beats_per_bar = 3
        config.history.max_undo = 1

        document = create_document(config, bar_count=2, channel_count=3)

        assert document.song.grid.parts_per_bar == 12
        assert document.song.bar_count == 2
        assert document.song.channel_count == 3
        assert document.history.max_size == 1

        document.song.bars[0].channels[0].append(Note(0, 4))
        move_notes_sideways(document, 1, "wrapAround")
        move_notes_sideways(document, 1, "wrapAround")
        assert len(document.history) == 1

    def test_create_document_defaults(self):
        """Test documents created without a configuration."""
        from bar_shift.core.operations import create_document, get_grid

        document = create_document()
        assert document.song.grid == get_grid()
        assert document.history.max_size == 50

    def test_open_music21_score(self, tmp_path):
        """Test opening a music21 score at the configured resolution."""
        from bar_shift.config import Config
        from bar_shift.core.operations import open_music21_score
        from music21 import stream, note

        config = Config(config_dir=tmp_path)
        config.grid.parts_per_beat = 2
        config.history.max_undo = 7

        m21_score = stream.Score()
        part = stream.Part()
        measure = stream.Measure(number=1)
        measure.append(note.Note("C4", quarterLength=2.0))
        measure.append(note.Note("E4", quarterLength=2.0))
        part.append(measure)
        m21_score.append(part)

        document = open_music21_score(m21_score, config)

        assert document.song.grid.parts_per_beat == 2
        assert [(n.start, n.end) for n in document.song.bars[0].channels[0]] == [(0, 4), (4, 8)]
        assert document.history.max_size == 7

    def test_move_notes_sideways_remembers_strategy(self, tmp_path):
        """Test that the strategy used becomes the stored default."""
        from bar_shift.config import Config
        from bar_shift.core.document import SongDocument
        from bar_shift.core.grid import Grid
        from bar_shift.core.operations import move_notes_sideways
        from bar_shift.core.song import Bar, Note, Song

        config = Config(config_dir=tmp_path)
        document = SongDocument(Song(Grid(4, 4), [Bar([[Note(12, 16)]])]))

        assert move_notes_sideways(document, 1, "wrapAround", config) is True
        assert [(n.start, n.end) for n in document.song.bars[0].channels[0]] == [(0, 4)]
        assert Config.load(tmp_path).shift.last_strategy == "wrapAround"

        # No strategy given: the remembered one is used
        move_notes_sideways(document, -1, config=config)
        assert document.song.bar_count == 1
        assert [(n.start, n.end) for n in document.song.bars[0].channels[0]] == [(12, 16)]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
