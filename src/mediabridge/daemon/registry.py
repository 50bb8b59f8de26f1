"""Registry holding the active playback session."""

from __future__ import annotations

import logging
import threading

from .session import MediaSession, SessionHandle

_logger = logging.getLogger("mediabridge.registry")


class SessionRegistry:
    """Thread-safe holder for the single active session handle.

    ``set`` always replaces the current handle (last writer wins). The
    registry does not own the session; the handle it stores is weak.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handle: SessionHandle | None = None

    def set(self, handle: SessionHandle | None) -> None:
        """Store the given handle, replacing any previous one."""
        with self._lock:
            previous = self._handle
            self._handle = handle
        if previous is not handle:
            _logger.info(f"Active session: {handle.name if handle else None}")

    def get(self) -> SessionHandle | None:
        """Return the current handle, or None if none was ever set."""
        with self._lock:
            return self._handle

    def clear(self) -> None:
        """Forget the active session."""
        self.set(None)

    def active_session(self) -> MediaSession | None:
        """Resolve the current handle to a live session.

        Absent and stale handles both give None.
        """
        handle = self.get()
        return handle.session() if handle else None
