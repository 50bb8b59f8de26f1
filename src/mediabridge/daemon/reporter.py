"""State reporter: pushes playback snapshots on change and on a fixed timer."""

from __future__ import annotations

import logging
import threading
import weakref
from typing import Callable, Sequence

from ..protocol.messages import PlaybackSnapshot
from .registry import SessionRegistry
from .session import MediaSession, SessionChange, SessionHandle
from .sink import SnapshotSink

_logger = logging.getLogger("mediabridge.reporter")

SessionDiscovery = Callable[[], Sequence[MediaSession]]


def build_snapshot(handle: SessionHandle | None) -> PlaybackSnapshot | None:
    """Build a snapshot from the session behind ``handle``.

    Returns None when the handle is absent or stale, or when the session has
    no metadata or no transport state.
    """
    session = handle.session() if handle else None
    if session is None:
        return None

    metadata = session.get_metadata()
    state = session.get_playback_state()
    if metadata is None or state is None:
        return None

    return PlaybackSnapshot(
        title=metadata.title or "",
        artist=metadata.artist or "",
        album=metadata.album or "",
        position_ms=max(0, int(state.position_ms)),
        is_playing=bool(state.playing),
    )


class StateReporter:
    """Reports the active session's playback state to a sink.

    Two triggers feed one build-and-push routine: change callbacks from the
    subscribed session, and a ticker thread that fires every ``interval``
    seconds whether or not anything changed.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        sink: SnapshotSink,
        discovery: SessionDiscovery | None = None,
        interval: float = 1.0,
    ):
        self.registry = registry
        self.sink = sink
        self.discovery = discovery
        self.interval = interval
        self._follow_lock = threading.Lock()
        self._subscribed: SessionHandle | None = None
        self._subscribed_ref: weakref.ref | None = None
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def subscribed(self) -> SessionHandle | None:
        return self._subscribed

    def start(self) -> None:
        """Discover the active session once and start the ticker."""
        if self._thread is not None:
            raise RuntimeError("State reporter already started")

        self._discover()

        self._stop.clear()
        self._thread = threading.Thread(
            target=self._tick_loop,
            name="mediabridge-state-ticker",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """Stop the ticker and drop the session subscription."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        self.follow(None)

    def _discover(self) -> None:
        try:
            sessions = list(self.discovery()) if self.discovery else []
        except Exception:
            _logger.exception("Session discovery failed")
            sessions = []

        if not sessions:
            # Discovery is not retried; a session can still be set later.
            _logger.info("No active media session")
            return

        handle = SessionHandle(sessions[0])
        _logger.info(f"Discovered {len(sessions)} session(s), using '{handle.name}'")
        self.registry.set(handle)
        self.follow(handle)

    def follow(self, handle: SessionHandle | None) -> None:
        """Move the change subscription to the session behind ``handle``."""
        with self._follow_lock:
            if handle is self._subscribed:
                return

            old = self._subscribed_ref() if self._subscribed_ref else None
            if old is not None:
                old.unregister_callback(self._on_change)

            self._subscribed = handle
            self._subscribed_ref = None

            session = handle.session() if handle else None
            if session is not None:
                self._subscribed_ref = weakref.ref(session)
                session.register_callback(self._on_change)
                _logger.debug(f"Subscribed to '{handle.name}'")

    def report(self) -> PlaybackSnapshot | None:
        """Build a snapshot of the active session and push it.

        Returns the snapshot pushed, or None if there was nothing to report.
        """
        snapshot = build_snapshot(self.registry.get())
        if snapshot is None:
            return None
        self.sink.push(snapshot)
        return snapshot

    def _on_change(self, change: SessionChange | str) -> None:
        """Session callback; may run on any thread."""
        try:
            _logger.debug(f"Session reported change: {change}")
            self.report()
        except Exception:
            _logger.exception("Snapshot after session change failed")

    def _tick_loop(self) -> None:
        while True:
            try:
                self.follow(self.registry.get())
                self.report()
            except Exception:
                _logger.exception("Periodic snapshot failed")

            if self._stop.wait(self.interval):
                break
