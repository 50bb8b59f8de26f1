"""Tests for LRC lyrics parsing and position tracking."""

from __future__ import annotations

import pytest

from mediabridge.lyrics import (
    LyricLine,
    LyricsFollower,
    LyricsLibrary,
    get_active_line_index,
    load_lyrics,
    parse_lrc,
    parse_with_translation,
)
from mediabridge.protocol.messages import PlaybackSnapshot

SONG = """\
[ar:Band]
[ti:Song]
[00:01.50]First line
[00:05.250]Second line

[00:10]Third line
"""


def snap(position_ms: int, title: str = "Song", artist: str = "Band") -> PlaybackSnapshot:
    return PlaybackSnapshot(
        title=title, artist=artist, album="", position_ms=position_ms, is_playing=True
    )


class TestParseLrc:
    def test_basic(self):
        lines = parse_lrc(SONG)

        assert [(l.time_ms, l.text) for l in lines] == [
            (1500, "First line"),
            (5250, "Second line"),
            (10000, "Third line"),
        ]

    def test_hundredths_and_milliseconds(self):
        lines = parse_lrc("[01:02.03]a\n[01:02.030]b\n[01:02.345]c")
        assert [l.time_ms for l in lines] == [62030, 62030, 62345]

    def test_multiple_tags_per_line(self):
        lines = parse_lrc("[00:30.00][00:10.00]Chorus\n[00:20.00]Verse")

        assert [(l.time_ms, l.text) for l in lines] == [
            (10000, "Chorus"),
            (20000, "Verse"),
            (30000, "Chorus"),
        ]

    def test_skips_untagged_and_empty(self):
        lines = parse_lrc("plain text\n\n   \n[00:01.00]\n[00:02.00]   \n[00:03.00]kept")
        assert [l.text for l in lines] == ["kept"]

    def test_sorted_by_time(self):
        lines = parse_lrc("[00:09.00]c\n[00:01.00]a\n[00:05.00]b")
        assert [l.text for l in lines] == ["a", "b", "c"]

    def test_windows_line_endings(self):
        lines = parse_lrc("[00:01.00]one\r\n[00:02.00]two\r\n")
        assert [l.text for l in lines] == ["one", "two"]

    @pytest.mark.parametrize("content", ["", "   ", "\n\n"])
    def test_empty_content(self, content):
        assert parse_lrc(content) == []

    def test_malformed_tags_ignored(self):
        assert parse_lrc("[0:01.00]short minutes\n[00:1.00]short seconds\n[00:01.5]one digit") == []


class TestTranslation:
    def test_merges_within_tolerance(self):
        original = "[00:01.00]Hello\n[00:05.00]World"
        translation = "[00:01.40]Hallo\n[00:05.60]Welt"

        lines = parse_with_translation(original, translation)

        assert lines[0].translation == "Hallo"
        # 600 ms apart is too far
        assert lines[1].translation is None

    def test_first_match_wins(self):
        lines = parse_with_translation("[00:01.00]Hi", "[00:00.80]Eins\n[00:01.20]Zwei")
        assert lines[0].translation == "Eins"

    @pytest.mark.parametrize("translation", [None, "", "  \n"])
    def test_no_translation(self, translation):
        lines = parse_with_translation("[00:01.00]Hi", translation)
        assert lines == [LyricLine(time_ms=1000, text="Hi")]


class TestActiveLine:
    @pytest.fixture
    def lines(self):
        return parse_lrc(SONG)

    @pytest.mark.parametrize(
        "position,expected",
        [(0, -1), (1499, -1), (1500, 0), (5000, 0), (5250, 1), (9999, 1), (10000, 2), (999999, 2)],
    )
    def test_index_at_position(self, lines, position, expected):
        assert get_active_line_index(lines, position) == expected

    def test_no_lines(self):
        assert get_active_line_index([], 5000) == -1


class TestLoading:
    def test_load_with_translation(self, tmp_path):
        original = tmp_path / "song.lrc"
        translated = tmp_path / "song.trans.lrc"
        original.write_text("\ufeff[00:01.00]Hello", encoding="utf-8")
        translated.write_text("[00:01.00]Bonjour", encoding="utf-8")

        lines = load_lyrics(original, translated)

        assert lines[0].text == "Hello"
        assert lines[0].translation == "Bonjour"

    def test_library_prefers_artist_and_title(self, tmp_path):
        (tmp_path / "Band - Song.lrc").write_text("[00:01.00]from artist file")
        (tmp_path / "Song.lrc").write_text("[00:01.00]from title file")

        lines = LyricsLibrary(tmp_path).lookup("Band", "Song")

        assert lines[0].text == "from artist file"

    def test_library_falls_back_to_title(self, tmp_path):
        (tmp_path / "Song.lrc").write_text("[00:01.00]from title file")
        (tmp_path / "Song.trans.lrc").write_text("[00:01.00]translated")

        lines = LyricsLibrary(tmp_path).lookup("Other Band", "Song")

        assert lines[0].text == "from title file"
        assert lines[0].translation == "translated"

    def test_library_sanitizes_names(self, tmp_path):
        (tmp_path / "AC_DC - Back_Forth.lrc").write_text("[00:01.00]riff")
        assert LyricsLibrary(tmp_path).lookup("AC/DC", "Back:Forth")[0].text == "riff"

    def test_library_missing(self, tmp_path):
        assert LyricsLibrary(tmp_path).lookup("Band", "Nothing") == []
        assert LyricsLibrary(tmp_path).lookup("", "") == []


class TestLyricsFollower:
    def test_reports_line_changes_only(self):
        follower = LyricsFollower(lines=parse_lrc(SONG))

        assert follower.update(snap(0)) is None
        assert follower.update(snap(1600)).text == "First line"
        assert follower.update(snap(2600)) is None
        assert follower.update(snap(5300)).text == "Second line"
        assert follower.current.text == "Second line"
        assert follower.upcoming.text == "Third line"

    def test_seek_backwards(self):
        follower = LyricsFollower(lines=parse_lrc(SONG))
        follower.update(snap(10000))

        assert follower.update(snap(2000)).text == "First line"

    def test_fixed_lines_survive_track_change(self):
        follower = LyricsFollower(lines=parse_lrc(SONG))
        follower.update(snap(1600))

        assert follower.update(snap(1600, title="Next Song")).text == "First line"

    def test_library_lookup_per_track(self, tmp_path):
        (tmp_path / "Band - Song.lrc").write_text("[00:01.00]one")
        (tmp_path / "Band - Other.lrc").write_text("[00:01.00]two")
        follower = LyricsFollower(library=LyricsLibrary(tmp_path))

        assert follower.update(snap(1500)).text == "one"
        assert follower.update(snap(1500, title="Other")).text == "two"
        assert follower.update(snap(1500, title="Unknown")) is None
        assert follower.current is None
        assert follower.upcoming is None
