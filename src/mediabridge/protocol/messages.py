"""Message definitions for the command and state channels."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any


class KeyCode(IntEnum):
    """Media keycodes understood on the command channel."""

    MEDIA_PLAY_PAUSE = 85
    MEDIA_NEXT = 87
    MEDIA_PREVIOUS = 88


class CommandType(str, Enum):
    """Playback actions a keycode can translate to."""

    PLAY_PAUSE = "play_pause"
    NEXT = "next"
    PREVIOUS = "previous"
    UNKNOWN = "unknown"


_KEYCODE_COMMANDS = {
    KeyCode.MEDIA_PLAY_PAUSE: CommandType.PLAY_PAUSE,
    KeyCode.MEDIA_NEXT: CommandType.NEXT,
    KeyCode.MEDIA_PREVIOUS: CommandType.PREVIOUS,
}

_TOKEN_RE = re.compile(r"[+-]?[0-9]+")


class CommandParseError(ValueError):
    """Raised when a command-channel token is not an integer."""


class SnapshotParseError(ValueError):
    """Raised when a state-channel line does not hold a snapshot record."""


@dataclass(frozen=True)
class Command:
    """A playback command derived from an integer keycode."""

    type: CommandType
    code: int

    @classmethod
    def from_code(cls, code: int) -> Command:
        return cls(type=_KEYCODE_COMMANDS.get(code, CommandType.UNKNOWN), code=code)

    @property
    def is_unknown(self) -> bool:
        return self.type == CommandType.UNKNOWN


def parse_command(token: str | bytes) -> Command:
    """Parse a single command token into a Command.

    The token must be a plain decimal integer, optionally signed, with
    surrounding whitespace allowed.
    """
    if isinstance(token, bytes):
        try:
            token = token.decode("ascii")
        except UnicodeDecodeError as e:
            raise CommandParseError(f"Non-ASCII command token: {token!r}") from e

    text = token.strip()
    if not _TOKEN_RE.fullmatch(text):
        raise CommandParseError(f"Invalid command token: {token!r}")

    return Command.from_code(int(text))


@dataclass(frozen=True)
class PlaybackSnapshot:
    """Current track metadata and transport position/state."""

    title: str
    artist: str
    album: str
    position_ms: int
    is_playing: bool

    def __post_init__(self):
        if self.position_ms < 0:
            raise ValueError(f"position_ms must be >= 0, got {self.position_ms}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "artist": self.artist,
            "album": self.album,
            "position": self.position_ms,
            "state": self.is_playing,
        }

    def serialize(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PlaybackSnapshot:
        try:
            position = data["position"]
            state = data["state"]
        except KeyError as e:
            raise SnapshotParseError(f"Missing field: {e.args[0]}") from e

        if isinstance(position, bool) or not isinstance(position, int):
            raise SnapshotParseError(f"position must be an integer, got {position!r}")
        if not isinstance(state, bool):
            raise SnapshotParseError(f"state must be a boolean, got {state!r}")

        return cls(
            title=_text(data.get("title")),
            artist=_text(data.get("artist")),
            album=_text(data.get("album")),
            position_ms=max(0, position),
            is_playing=state,
        )


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def parse_snapshot(text: str) -> PlaybackSnapshot:
    """Parse a JSON snapshot record."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SnapshotParseError(f"Invalid snapshot JSON: {e}") from e

    if not isinstance(data, dict):
        raise SnapshotParseError(f"Snapshot must be an object: {text!r}")

    return PlaybackSnapshot.from_dict(data)
