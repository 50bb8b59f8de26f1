"""Output formatting for CLI."""

from __future__ import annotations

import json
import sys

from ..lyrics import LyricLine
from ..protocol.messages import PlaybackSnapshot


def format_time(milliseconds: int) -> str:
    """Format milliseconds as M:SS or H:MM:SS."""
    if milliseconds <= 0:
        return "0:00"

    seconds = milliseconds // 1000
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_track(snapshot: PlaybackSnapshot) -> str:
    """Format artist/title for display."""
    parts = [p for p in (snapshot.artist, snapshot.title) if p]
    text = " - ".join(parts) if parts else "(unknown track)"
    if snapshot.album:
        text += f" [{snapshot.album}]"
    return text


def format_snapshot(snapshot: PlaybackSnapshot) -> str:
    """Format a snapshot as a one-line status."""
    state_icon = "▶" if snapshot.is_playing else "⏸"
    return f"{state_icon} {format_track(snapshot)}  {format_time(snapshot.position_ms)}"


def print_snapshot(snapshot: PlaybackSnapshot, json_output: bool = False) -> None:
    """Print snapshot to stdout."""
    if json_output:
        print(json.dumps(snapshot.to_dict(), ensure_ascii=False))
    else:
        print(format_snapshot(snapshot))
    sys.stdout.flush()


def format_lyric(line: LyricLine) -> str:
    """Format a lyric line, with its translation on a second line."""
    text = f"  ♪ {line.text}"
    if line.translation:
        text += f"\n    {line.translation}"
    return text


def print_lyric(line: LyricLine, json_output: bool = False) -> None:
    """Print the lyric line that became current."""
    if json_output:
        data = {"time": line.time_ms, "lyric": line.text, "translation": line.translation}
        print(json.dumps(data, ensure_ascii=False))
    else:
        print(format_lyric(line))
    sys.stdout.flush()
