"""mediabridge daemon - command channel and state reporter around one active session."""

from .daemon import Daemon
from .dispatch import dispatch
from .main import DaemonRunner, main
from .registry import SessionRegistry
from .reporter import StateReporter, build_snapshot
from .server import CommandServer
from .session import (
    MediaSession,
    SessionChange,
    SessionHandle,
    TrackMetadata,
    TransportControls,
    TransportState,
)
from .sink import LogSink, SnapshotSink

__all__ = [
    "main",
    "Daemon",
    "DaemonRunner",
    "SessionRegistry",
    "CommandServer",
    "StateReporter",
    "build_snapshot",
    "dispatch",
    "MediaSession",
    "SessionChange",
    "SessionHandle",
    "TrackMetadata",
    "TransportControls",
    "TransportState",
    "LogSink",
    "SnapshotSink",
]
