"""Tests for command dispatch."""

from __future__ import annotations

import gc

import pytest

from mediabridge.daemon.dispatch import dispatch
from mediabridge.daemon.session import SessionHandle
from mediabridge.protocol.messages import Command


class TestDispatch:
    """dispatch() tests."""

    @pytest.mark.parametrize(
        "code,expected",
        [
            (85, ["play", "pause"]),
            (87, ["skip_to_next"]),
            (88, ["skip_to_previous"]),
            (86, []),
            (999, []),
            (-1, []),
        ],
    )
    def test_keycode_actions(self, session, code, expected):
        dispatch(Command.from_code(code), SessionHandle(session))
        assert session.controls.calls == expected

    def test_play_pause_is_fixed_sequence(self, session):
        dispatch(Command.from_code(85), SessionHandle(session))
        dispatch(Command.from_code(85), SessionHandle(session))

        # No state query: every toggle is play then pause
        assert session.controls.calls == ["play", "pause", "play", "pause"]

    def test_no_handle(self):
        dispatch(Command.from_code(87), None)

    def test_invalidated_handle(self, session):
        handle = SessionHandle(session)
        handle.invalidate()

        dispatch(Command.from_code(87), handle)
        assert session.controls.calls == []

    def test_collected_session(self, make_session):
        session = make_session()
        controls = session.controls
        handle = SessionHandle(session)
        del session
        gc.collect()

        dispatch(Command.from_code(85), handle)
        assert controls.calls == []

    def test_uses_registry_replacement(self, registry, session, make_session):
        registry.set(SessionHandle(session))
        other = make_session(name="other")
        registry.set(SessionHandle(other))

        dispatch(Command.from_code(87), registry.get())

        assert session.controls.calls == []
        assert other.controls.calls == ["skip_to_next"]
