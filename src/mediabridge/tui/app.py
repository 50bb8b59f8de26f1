"""mediabridge TUI Application."""

from __future__ import annotations

import asyncio
import logging
import threading
from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Vertical

from ..cli import commands
from ..config import ClientConfig
from ..lyrics import LyricsFollower
from ..protocol.messages import KeyCode, PlaybackSnapshot
from .widgets import HelpBar, LyricsPanel, NowPlaying, PositionDisplay, StatusBar

_logger = logging.getLogger("mediabridge.tui")


class MediaBridgeApp(App):
    """mediabridge Terminal User Interface."""

    CSS = """
    Screen {
        background: $surface;
    }

    #main-container {
        height: 100%;
    }

    #content {
        height: 1fr;
        padding: 1;
    }
    """

    BINDINGS = [
        Binding("space", "toggle_playback", "Play/Pause", show=True),
        Binding("n", "next_track", "Next"),
        Binding("p", "prev_track", "Previous"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        client: ClientConfig | None = None,
        state_log: Path | None = None,
        lyrics: LyricsFollower | None = None,
    ):
        super().__init__()
        self.client = client or ClientConfig()
        self.state_log = state_log
        self.lyrics = lyrics
        self._stop_watching = threading.Event()

    def compose(self) -> ComposeResult:
        yield StatusBar(id="status-bar")
        with Container(id="main-container"):
            with Vertical(id="content"):
                yield NowPlaying(id="now-playing")
                yield PositionDisplay(id="position")
                yield LyricsPanel(id="lyrics")
        yield HelpBar()

    def on_mount(self) -> None:
        """Start following the state log."""
        status_bar = self.query_one("#status-bar", StatusBar)
        status_bar.target = f"{self.client.host}:{self.client.port}"
        self.run_worker(self._watch_snapshots, thread=True, exclusive=True)

    def on_unmount(self) -> None:
        self._stop_watching.set()

    def _watch_snapshots(self) -> None:
        """Worker thread: follow the state log and forward snapshots."""
        path = self.state_log or commands.get_state_log()
        for snapshot in commands.watch_snapshots(path, stop=self._stop_watching):
            self.call_from_thread(self.update_snapshot, snapshot)

    def update_snapshot(self, snapshot: PlaybackSnapshot) -> None:
        """Update UI from a snapshot."""
        now_playing = self.query_one("#now-playing", NowPlaying)
        now_playing.title = snapshot.title or "(unknown title)"
        now_playing.artist = snapshot.artist
        now_playing.album = snapshot.album

        self.query_one("#position", PositionDisplay).position = snapshot.position_ms
        self.query_one("#status-bar", StatusBar).playing = snapshot.is_playing

        if self.lyrics is not None:
            self.lyrics.update(snapshot)
            current = self.lyrics.current
            upcoming = self.lyrics.upcoming
            panel = self.query_one("#lyrics", LyricsPanel)
            panel.current = current.text if current else ""
            panel.translation = (current.translation or "") if current else ""
            panel.upcoming = upcoming.text if upcoming else ""

    def _send_keycode(self, code: KeyCode) -> None:
        """Send keycode without blocking the UI."""

        async def do_send():
            try:
                await asyncio.to_thread(commands.cmd_send, code, self.client)
            except OSError as e:
                _logger.warning(f"Sending keycode {int(code)} failed: {e}")
                self.notify(f"Command failed: {e}", severity="error")

        asyncio.create_task(do_send())

    # Action handlers

    def action_toggle_playback(self) -> None:
        """Toggle play/pause."""
        self._send_keycode(KeyCode.MEDIA_PLAY_PAUSE)

    def action_next_track(self) -> None:
        """Skip to next track."""
        self._send_keycode(KeyCode.MEDIA_NEXT)

    def action_prev_track(self) -> None:
        """Go to previous track."""
        self._send_keycode(KeyCode.MEDIA_PREVIOUS)


def main(client: ClientConfig | None = None, lyrics: LyricsFollower | None = None) -> None:
    """Main entry point for TUI."""
    app = MediaBridgeApp(client, lyrics=lyrics)
    app.run()


if __name__ == "__main__":
    main()
