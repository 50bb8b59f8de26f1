"""Timed LRC lyrics: parsing, translations and position lookup."""

from __future__ import annotations

import bisect
import logging
import re
from dataclasses import dataclass
from pathlib import Path

from .protocol.messages import PlaybackSnapshot

_logger = logging.getLogger("mediabridge.lyrics")

_TIME_TAG_RE = re.compile(r"\[([0-9]{2}):([0-9]{2})(?:\.([0-9]{2,3}))?\]")
_UNSAFE_FILENAME_RE = re.compile(r'[\\/:*?"<>|]')

# Translation lines this close to an original line belong to it
TRANSLATION_TOLERANCE_MS = 500

TRANSLATION_SUFFIX = ".trans.lrc"


@dataclass
class LyricLine:
    """One timed lyric line."""

    time_ms: int
    text: str
    translation: str | None = None


def _tag_to_ms(minutes: str, seconds: str, fraction: str | None) -> int:
    ms = (int(minutes) * 60 + int(seconds)) * 1000
    if fraction:
        # Two digits are hundredths, three are milliseconds
        ms += int(fraction) * 10 if len(fraction) == 2 else int(fraction)
    return ms


def parse_lrc(content: str) -> list[LyricLine]:
    """Parse LRC text into lines sorted by time.

    A line may carry several time tags and is repeated once per tag. Lines
    without a tag (including ``[ar:...]`` style headers) and tags with no text
    are skipped.
    """
    lines: list[LyricLine] = []
    for raw in content.replace("\r", "").split("\n"):
        line = raw.strip()
        if not line:
            continue

        tags = _TIME_TAG_RE.findall(line)
        if not tags:
            continue

        text = _TIME_TAG_RE.sub("", line).strip()
        if not text:
            continue

        for minutes, seconds, fraction in tags:
            lines.append(LyricLine(time_ms=_tag_to_ms(minutes, seconds, fraction), text=text))

    lines.sort(key=lambda line: line.time_ms)
    return lines


def parse_with_translation(original: str, translation: str | None) -> list[LyricLine]:
    """Parse original lyrics and attach translated text to matching lines.

    A translated line matches an original line when their times differ by
    less than TRANSLATION_TOLERANCE_MS; the earliest such line wins.
    """
    lines = parse_lrc(original)
    if not translation or not translation.strip():
        return lines

    translated = parse_lrc(translation)
    for line in lines:
        for candidate in translated:
            if abs(candidate.time_ms - line.time_ms) < TRANSLATION_TOLERANCE_MS:
                line.translation = candidate.text
                break
    return lines


def get_active_line_index(lines: list[LyricLine], position_ms: int) -> int:
    """Index of the last line starting at or before ``position_ms``, or -1."""
    times = [line.time_ms for line in lines]
    return bisect.bisect_right(times, position_ms) - 1


def load_lyrics(path: Path, translation_path: Path | None = None) -> list[LyricLine]:
    """Read an LRC file and an optional translation file."""
    original = path.read_text(encoding="utf-8-sig")
    translation = None
    if translation_path is not None:
        translation = translation_path.read_text(encoding="utf-8-sig")
    return parse_with_translation(original, translation)


class LyricsLibrary:
    """Directory of ``.lrc`` files named after the tracks they belong to.

    For a track, ``"<artist> - <title>.lrc"`` is tried first, then
    ``"<title>.lrc"``. A translation sits next to it as
    ``"<same name>.trans.lrc"``. Results are cached per track.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory).expanduser()
        self._cache: dict[tuple[str, str], list[LyricLine]] = {}

    def candidates(self, artist: str, title: str) -> list[Path]:
        names = []
        if artist and title:
            names.append(f"{artist} - {title}")
        if title:
            names.append(title)
        return [self.directory / f"{_UNSAFE_FILENAME_RE.sub('_', n)}.lrc" for n in names]

    def lookup(self, artist: str, title: str) -> list[LyricLine]:
        """Return the lyrics for a track, or an empty list if none exist."""
        key = (artist, title)
        if key not in self._cache:
            self._cache[key] = self._load(artist, title)
        return self._cache[key]

    def _load(self, artist: str, title: str) -> list[LyricLine]:
        for path in self.candidates(artist, title):
            if not path.is_file():
                continue
            translation = path.with_name(path.stem + TRANSLATION_SUFFIX)
            try:
                lines = load_lyrics(path, translation if translation.is_file() else None)
            except (OSError, UnicodeDecodeError) as e:
                _logger.warning(f"Cannot read lyrics {path}: {e}")
                continue
            _logger.debug(f"Loaded {len(lines)} lyric lines from {path}")
            return lines
        return []


class LyricsFollower:
    """Tracks the current lyric line as snapshots arrive.

    With fixed ``lines`` the same lyrics apply to every track; otherwise they
    are looked up in ``library`` whenever the track changes.
    """

    def __init__(
        self,
        lines: list[LyricLine] | None = None,
        library: LyricsLibrary | None = None,
    ):
        self._fixed = lines
        self.library = library
        self.lines: list[LyricLine] = list(lines or [])
        self.index = -1
        self._track: tuple[str, str] | None = None

    @property
    def current(self) -> LyricLine | None:
        return self.lines[self.index] if self.index >= 0 else None

    @property
    def upcoming(self) -> LyricLine | None:
        if self.index + 1 < len(self.lines):
            return self.lines[self.index + 1]
        return None

    def update(self, snapshot: PlaybackSnapshot) -> LyricLine | None:
        """Advance to ``snapshot``'s position.

        Returns the current line when it differs from the previous update,
        otherwise None.
        """
        track = (snapshot.artist, snapshot.title)
        if track != self._track:
            self._track = track
            self.index = -1
            if self._fixed is None:
                self.lines = self.library.lookup(*track) if self.library else []

        index = get_active_line_index(self.lines, snapshot.position_ms)
        if index == self.index:
            return None
        self.index = index
        return self.current
