"""mediabridge protocol - keycodes on the command channel, JSON snapshots on the state channel."""

from .client import follow, iter_snapshots, parse_snapshot_line, send_keycode
from .messages import (
    Command,
    CommandParseError,
    CommandType,
    KeyCode,
    PlaybackSnapshot,
    SnapshotParseError,
    parse_command,
    parse_snapshot,
)

__all__ = [
    "KeyCode",
    "CommandType",
    "Command",
    "CommandParseError",
    "PlaybackSnapshot",
    "SnapshotParseError",
    "parse_command",
    "parse_snapshot",
    "send_keycode",
    "parse_snapshot_line",
    "iter_snapshots",
    "follow",
]
