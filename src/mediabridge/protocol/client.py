"""Client helpers for the command and state channels."""

from __future__ import annotations

import logging
import socket
import threading
from pathlib import Path
from typing import Iterable, Iterator

from ..config import DEFAULT_PORT
from .messages import PlaybackSnapshot, SnapshotParseError, parse_snapshot

_logger = logging.getLogger("mediabridge.client")


def send_keycode(
    code: int,
    host: str = "127.0.0.1",
    port: int = DEFAULT_PORT,
    timeout: float = 5.0,
) -> None:
    """Send one keycode to a command server.

    The protocol is fire-and-forget: the server never answers, so success
    only means the bytes were handed to the connection.
    """
    with socket.create_connection((host, port), timeout=timeout) as sock:
        sock.sendall(f"{int(code)}\n".encode("ascii"))


def parse_snapshot_line(line: str) -> PlaybackSnapshot:
    """Parse a state-channel line, ignoring any log prefix before the record."""
    start = line.find("{")
    if start < 0:
        raise SnapshotParseError(f"No snapshot record in line: {line!r}")
    return parse_snapshot(line[start:].strip())


def iter_snapshots(lines: Iterable[str]) -> Iterator[PlaybackSnapshot]:
    """Yield the snapshots found in ``lines``, skipping anything else."""
    for line in lines:
        if "{" not in line:
            continue
        try:
            yield parse_snapshot_line(line)
        except SnapshotParseError as e:
            _logger.debug(f"Skipping line: {e}")


def follow(
    path: Path,
    from_start: bool = False,
    poll_interval: float = 0.25,
    stop: threading.Event | None = None,
) -> Iterator[str]:
    """Yield lines appended to ``path``, like ``tail -f``.

    Starts at the end of the file unless ``from_start`` is set. Runs until
    ``stop`` is set, or forever without one.
    """
    stop = stop or threading.Event()

    while not path.exists():
        if stop.wait(poll_interval):
            return

    with open(path, "r", encoding="utf-8", errors="replace") as f:
        if not from_start:
            f.seek(0, 2)

        partial = ""
        while not stop.is_set():
            line = f.readline()
            if not line:
                stop.wait(poll_interval)
                continue

            partial += line
            if not partial.endswith("\n"):
                continue

            yield partial.rstrip("\n")
            partial = ""
