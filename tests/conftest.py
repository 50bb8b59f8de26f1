"""Pytest configuration and fixtures for mediabridge tests."""

from __future__ import annotations

import os
import socket
import threading
import time
from pathlib import Path
from typing import Callable, Generator

import pytest

from mediabridge.daemon.registry import SessionRegistry
from mediabridge.daemon.session import (
    SessionChange,
    SessionHandle,
    TrackMetadata,
    TransportState,
)
from mediabridge.protocol.messages import PlaybackSnapshot


class FakeControls:
    """Transport controls that record every call."""

    def __init__(self):
        self.calls: list[str] = []
        self._lock = threading.Lock()
        self.called = threading.Condition(self._lock)

    def _record(self, name: str) -> None:
        with self.called:
            self.calls.append(name)
            self.called.notify_all()

    def play(self) -> None:
        self._record("play")

    def pause(self) -> None:
        self._record("pause")

    def skip_to_next(self) -> None:
        self._record("skip_to_next")

    def skip_to_previous(self) -> None:
        self._record("skip_to_previous")

    def wait_for(self, count: int, timeout: float = 2.0) -> bool:
        with self.called:
            return self.called.wait_for(lambda: len(self.calls) >= count, timeout)


class FakeSession:
    """In-memory media session with settable metadata and state."""

    def __init__(
        self,
        name: str = "fake",
        metadata: TrackMetadata | None = None,
        state: TransportState | None = None,
    ):
        self._name = name
        self.controls = FakeControls()
        self.metadata = metadata
        self.state = state
        self.callbacks: list[Callable[[SessionChange], None]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def transport_controls(self) -> FakeControls:
        return self.controls

    def get_metadata(self) -> TrackMetadata | None:
        return self.metadata

    def get_playback_state(self) -> TransportState | None:
        return self.state

    def register_callback(self, callback) -> None:
        self.callbacks.append(callback)

    def unregister_callback(self, callback) -> None:
        if callback in self.callbacks:
            self.callbacks.remove(callback)

    def change_track(self, metadata: TrackMetadata) -> None:
        self.metadata = metadata
        for callback in list(self.callbacks):
            callback(SessionChange.METADATA)

    def change_state(self, state: TransportState) -> None:
        self.state = state
        for callback in list(self.callbacks):
            callback(SessionChange.PLAYBACK_STATE)


class CollectingSink:
    """Sink that keeps every snapshot pushed to it."""

    def __init__(self):
        self.snapshots: list[PlaybackSnapshot] = []
        self.times: list[float] = []
        self.pushed = threading.Condition()

    def push(self, snapshot: PlaybackSnapshot) -> None:
        with self.pushed:
            self.snapshots.append(snapshot)
            self.times.append(time.monotonic())
            self.pushed.notify_all()

    def wait_for(self, count: int, timeout: float = 2.0) -> bool:
        with self.pushed:
            return self.pushed.wait_for(lambda: len(self.snapshots) >= count, timeout)


def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    """Poll ``predicate`` until it holds or the timeout passes."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def track_a() -> TrackMetadata:
    return TrackMetadata(title="Song A", artist="Artist A", album="Album A")


@pytest.fixture
def track_b() -> TrackMetadata:
    return TrackMetadata(title="Song B", artist="Artist B", album="Album B")


@pytest.fixture
def session(track_a) -> FakeSession:
    """A playing session with metadata and transport state."""
    return FakeSession(
        name="player",
        metadata=track_a,
        state=TransportState(position_ms=1500, playing=True),
    )


@pytest.fixture
def registry() -> SessionRegistry:
    return SessionRegistry()


@pytest.fixture
def active_registry(registry, session) -> SessionRegistry:
    """Registry with ``session`` registered as active."""
    registry.set(SessionHandle(session))
    return registry


@pytest.fixture
def sink() -> CollectingSink:
    return CollectingSink()


@pytest.fixture
def free_port() -> int:
    """A TCP port that was free a moment ago."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def temp_state_dir(tmp_path: Path) -> Generator[Path, None, None]:
    """Point XDG_STATE_HOME at a temporary directory."""
    state = tmp_path / "mediabridge"
    state.mkdir(parents=True)

    old_env = os.environ.get("XDG_STATE_HOME")
    os.environ["XDG_STATE_HOME"] = str(tmp_path)

    yield state

    if old_env:
        os.environ["XDG_STATE_HOME"] = old_env
    else:
        os.environ.pop("XDG_STATE_HOME", None)


@pytest.fixture
def temp_config_file(tmp_path: Path) -> Generator[Path, None, None]:
    """Point MEDIABRIDGE_CONFIG at a (not yet written) temporary file."""
    config_file = tmp_path / "config.toml"

    old_env = os.environ.get("MEDIABRIDGE_CONFIG")
    os.environ["MEDIABRIDGE_CONFIG"] = str(config_file)

    yield config_file

    if old_env:
        os.environ["MEDIABRIDGE_CONFIG"] = old_env
    else:
        os.environ.pop("MEDIABRIDGE_CONFIG", None)


@pytest.fixture
def make_session() -> type[FakeSession]:
    """Factory for extra fake sessions."""
    return FakeSession


@pytest.fixture(name="wait_until")
def wait_until_fixture() -> Callable[..., bool]:
    return wait_until
