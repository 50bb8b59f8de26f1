"""Destinations for playback snapshots."""

from __future__ import annotations

import logging
from typing import Protocol

from ..protocol.messages import PlaybackSnapshot


class SnapshotSink(Protocol):
    """One-way receiver of snapshots. ``push`` must not block."""

    def push(self, snapshot: PlaybackSnapshot) -> None: ...


class LogSink:
    """Emit each snapshot as one log record holding its JSON encoding."""

    def __init__(self, logger_name: str = "mediabridge.state"):
        self.logger = logging.getLogger(logger_name)

    def push(self, snapshot: PlaybackSnapshot) -> None:
        self.logger.info(snapshot.serialize())
