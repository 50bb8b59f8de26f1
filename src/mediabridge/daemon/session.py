"""Playback session interfaces and weak session handles."""

from __future__ import annotations

import logging
import threading
import weakref
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol

_logger = logging.getLogger("mediabridge.session")


class SessionChange(str, Enum):
    """Kinds of change a session reports to its callbacks."""

    METADATA = "metadata"
    PLAYBACK_STATE = "playback_state"


SessionCallback = Callable[[SessionChange], None]


@dataclass(frozen=True)
class TrackMetadata:
    """Track metadata as reported by a session."""

    title: str | None = None
    artist: str | None = None
    album: str | None = None


@dataclass(frozen=True)
class TransportState:
    """Transport position and play state as reported by a session."""

    position_ms: int = 0
    playing: bool = False


class TransportControls(Protocol):
    """Playback actions exposed by a session."""

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def skip_to_next(self) -> None: ...

    def skip_to_previous(self) -> None: ...


class MediaSession(Protocol):
    """An externally owned playback session.

    Implementations are provided by a discovery provider. They may invoke
    registered callbacks from any thread.
    """

    @property
    def name(self) -> str: ...

    @property
    def transport_controls(self) -> TransportControls: ...

    def get_metadata(self) -> TrackMetadata | None: ...

    def get_playback_state(self) -> TransportState | None: ...

    def register_callback(self, callback: SessionCallback) -> None: ...

    def unregister_callback(self, callback: SessionCallback) -> None: ...


class SessionHandle:
    """Weak reference to a MediaSession.

    The handle never keeps the session alive. It goes stale once the session
    is collected or once discovery calls ``invalidate()``; ``session()`` then
    returns None.
    """

    def __init__(self, session: MediaSession):
        self._ref = weakref.ref(session)
        self._name = getattr(session, "name", repr(session))
        self._invalidated = threading.Event()

    @property
    def name(self) -> str:
        return self._name

    @property
    def stale(self) -> bool:
        return self.session() is None

    def session(self) -> MediaSession | None:
        """Return the live session, or None if the handle is stale."""
        if self._invalidated.is_set():
            return None
        return self._ref()

    def invalidate(self) -> None:
        """Mark the handle stale regardless of the session's lifetime."""
        if not self._invalidated.is_set():
            _logger.debug(f"Session handle '{self._name}' invalidated")
        self._invalidated.set()

    def refers_to(self, session: MediaSession) -> bool:
        return self._ref() is session

    def __repr__(self) -> str:
        state = "stale" if self.stale else "live"
        return f"SessionHandle({self._name!r}, {state})"
