"""The mediabridge daemon: command channel plus state channel."""

from __future__ import annotations

import logging
from typing import Callable

from ..config import DEFAULT_PORT
from .registry import SessionRegistry
from .reporter import SessionDiscovery, StateReporter
from .server import CommandServer
from .session import MediaSession, SessionHandle
from .sink import LogSink, SnapshotSink

_logger = logging.getLogger("mediabridge.daemon")


class Daemon:
    """Binds one shared SessionRegistry to a CommandServer and a StateReporter."""

    def __init__(
        self,
        port: int = DEFAULT_PORT,
        host: str = "0.0.0.0",
        sink: SnapshotSink | None = None,
        discovery: SessionDiscovery | None = None,
        interval: float = 1.0,
        read_timeout: float | None = None,
        max_token_bytes: int = 32,
        on_fatal: Callable[[BaseException], None] | None = None,
    ):
        self.port = port
        self.registry = SessionRegistry()
        self.sink = sink or LogSink()
        self.server = CommandServer(
            self.registry,
            host=host,
            read_timeout=read_timeout,
            max_token_bytes=max_token_bytes,
            on_fatal=on_fatal,
        )
        self.reporter = StateReporter(
            self.registry,
            self.sink,
            discovery=discovery,
            interval=interval,
        )

    def start(self) -> None:
        """Start reporting, then open the command channel.

        A bind failure stops the reporter again and re-raises.
        """
        self.reporter.start()
        try:
            self.server.start(self.port)
        except OSError:
            self.reporter.stop()
            raise
        _logger.info("Daemon started")

    def stop(self) -> None:
        """Stop both channels."""
        self.server.stop()
        self.reporter.stop()
        _logger.info("Daemon stopped")

    def set_active_session(self, session: MediaSession | None) -> SessionHandle | None:
        """Replace the active session, for use by external discovery.

        The previous handle is invalidated. Passing None clears the registry.
        """
        previous = self.registry.get()
        if (
            previous is not None
            and session is not None
            and not previous.stale
            and previous.refers_to(session)
        ):
            return previous

        handle = SessionHandle(session) if session is not None else None
        self.registry.set(handle)
        if previous is not None:
            previous.invalidate()
        self.reporter.follow(handle)
        return handle
