"""CLI command implementations."""

from __future__ import annotations

import sys
import threading
from collections import deque
from pathlib import Path
from typing import Iterator

from ..config import ClientConfig, get_effective_state_dir, load_config
from ..lyrics import LyricsFollower, LyricsLibrary, load_lyrics
from ..protocol.client import follow, iter_snapshots, send_keycode
from ..protocol.messages import KeyCode, PlaybackSnapshot


def get_state_log() -> Path:
    """Get the state log written by a local daemon."""
    return get_effective_state_dir(load_config()) / "state.log"


def cmd_send(code: int, client: ClientConfig) -> None:
    """Send a raw keycode."""
    send_keycode(code, host=client.host, port=client.port, timeout=client.timeout)


def cmd_play_pause(client: ClientConfig) -> None:
    """Toggle play/pause."""
    cmd_send(KeyCode.MEDIA_PLAY_PAUSE, client)


def cmd_next(client: ClientConfig) -> None:
    """Next track."""
    cmd_send(KeyCode.MEDIA_NEXT, client)


def cmd_prev(client: ClientConfig) -> None:
    """Previous track."""
    cmd_send(KeyCode.MEDIA_PREVIOUS, client)


def cmd_status(path: Path | None = None) -> PlaybackSnapshot | None:
    """Return the most recent snapshot in a state log."""
    path = path or get_state_log()
    if not path.exists():
        raise FileNotFoundError(f"State log not found: {path}")

    with open(path, "r", encoding="utf-8", errors="replace") as f:
        # Only the tail matters; the log grows by one line per second.
        tail = deque(f, maxlen=50)

    last = None
    for snapshot in iter_snapshots(tail):
        last = snapshot
    return last


def watch_snapshots(
    path: Path | None,
    from_start: bool = False,
    stop: threading.Event | None = None,
) -> Iterator[PlaybackSnapshot]:
    """Yield snapshots from a followed file, or from stdin when path is None."""
    if path is None:
        lines = (line.rstrip("\n") for line in sys.stdin)
    else:
        lines = follow(path, from_start=from_start, stop=stop)
    yield from iter_snapshots(lines)


def make_lyrics_follower(
    client: ClientConfig,
    lyrics_file: Path | None = None,
    translation_file: Path | None = None,
) -> LyricsFollower | None:
    """Lyrics from an explicit file, else from the configured directory.

    Returns None when neither is given.
    """
    if lyrics_file is not None:
        return LyricsFollower(lines=load_lyrics(lyrics_file, translation_file))
    if client.lyrics_dir:
        return LyricsFollower(library=LyricsLibrary(Path(client.lyrics_dir)))
    return None
