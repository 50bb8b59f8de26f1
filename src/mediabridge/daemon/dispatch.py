"""Translate commands into transport control calls."""

from __future__ import annotations

import logging

from ..protocol.messages import Command, CommandType
from .session import SessionHandle, TransportControls

_logger = logging.getLogger("mediabridge.dispatch")


def _play_pause(controls: TransportControls) -> None:
    # Fixed sequence; the current play state is never queried.
    controls.play()
    controls.pause()


def _next(controls: TransportControls) -> None:
    controls.skip_to_next()


def _previous(controls: TransportControls) -> None:
    controls.skip_to_previous()


_ACTIONS = {
    CommandType.PLAY_PAUSE: _play_pause,
    CommandType.NEXT: _next,
    CommandType.PREVIOUS: _previous,
}


def dispatch(command: Command, handle: SessionHandle | None) -> None:
    """Run a command against the session behind ``handle``.

    Does nothing when the handle is absent or stale, or when the command is
    unknown.
    """
    action = _ACTIONS.get(command.type)
    if action is None:
        _logger.debug(f"Ignoring unknown keycode {command.code}")
        return

    session = handle.session() if handle else None
    if session is None:
        _logger.debug(f"No active session for {command.type.value}")
        return

    _logger.info(f"Dispatching {command.type.value} to '{handle.name}'")
    action(session.transport_controls)
