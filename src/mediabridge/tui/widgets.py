"""Custom widgets for mediabridge TUI."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.reactive import reactive
from textual.widget import Widget
from textual.widgets import Static

from ..cli.output import format_time


WAITING_TEXT = "Waiting for device..."


def _show(parent: Widget, selector: str, text: str) -> None:
    """Update a child Static, if it has been composed yet."""
    for widget in parent.query(selector).results(Static):
        widget.update(text)


class NowPlaying(Static):
    """Widget displaying current track information."""

    DEFAULT_CSS = """
    NowPlaying {
        height: auto;
        padding: 1;
    }

    NowPlaying .title {
        text-style: bold;
    }

    NowPlaying .artist {
        color: $text-muted;
    }

    NowPlaying .album {
        color: $text-muted;
        text-style: italic;
    }
    """

    title: reactive[str] = reactive(WAITING_TEXT)
    artist: reactive[str] = reactive("")
    album: reactive[str] = reactive("")

    def compose(self) -> ComposeResult:
        yield Static("Now Playing:", classes="label")
        # Reactives are not read here: their watchers would run before these children exist
        yield Static(WAITING_TEXT, classes="title", id="track-title")
        yield Static(classes="artist", id="track-artist")
        yield Static(classes="album", id="track-album")

    def on_mount(self) -> None:
        _show(self, "#track-title", self.title)
        _show(self, "#track-artist", self.artist)
        _show(self, "#track-album", self.album)

    def watch_title(self, value: str) -> None:
        _show(self, "#track-title", value)

    def watch_artist(self, value: str) -> None:
        _show(self, "#track-artist", value)

    def watch_album(self, value: str) -> None:
        _show(self, "#track-album", value)


class PositionDisplay(Static):
    """Widget displaying the reported playback position."""

    DEFAULT_CSS = """
    PositionDisplay {
        height: 1;
        padding: 0 1;
    }
    """

    position: reactive[int] = reactive(0)

    def render(self) -> str:
        return format_time(self.position)


class StatusBar(Static):
    """Widget displaying play state and the command target."""

    DEFAULT_CSS = """
    StatusBar {
        height: 1;
        dock: top;
        background: $primary;
        color: $text;
        padding: 0 1;
    }

    StatusBar Horizontal {
        height: 1;
    }

    StatusBar .spacer {
        width: 1fr;
    }

    StatusBar .target {
        width: auto;
    }
    """

    playing: reactive[bool | None] = reactive(None)
    target: reactive[str] = reactive("")

    def compose(self) -> ComposeResult:
        with Horizontal():
            yield Static("mediabridge", classes="logo")
            yield Static(" ", classes="spacer")
            yield Static("?", id="state-icon")
            yield Static(classes="spacer")
            yield Static(id="target", classes="target")

    def on_mount(self) -> None:
        self.watch_playing(self.playing)
        self.watch_target(self.target)

    def watch_playing(self, value: bool | None) -> None:
        icon = {True: "▶", False: "⏸"}.get(value, "?")
        _show(self, "#state-icon", icon)

    def watch_target(self, value: str) -> None:
        _show(self, "#target", value)


class LyricsPanel(Static):
    """Widget displaying the current lyric line, its translation and the next line."""

    DEFAULT_CSS = """
    LyricsPanel {
        height: auto;
        padding: 1;
    }

    LyricsPanel .current {
        text-style: bold;
    }

    LyricsPanel .translation, LyricsPanel .upcoming {
        color: $text-muted;
    }
    """

    current: reactive[str] = reactive("")
    translation: reactive[str] = reactive("")
    upcoming: reactive[str] = reactive("")

    def compose(self) -> ComposeResult:
        yield Static(classes="current", id="lyric-current")
        yield Static(classes="translation", id="lyric-translation")
        yield Static(classes="upcoming", id="lyric-upcoming")

    def on_mount(self) -> None:
        _show(self, "#lyric-current", self.current)
        _show(self, "#lyric-translation", self.translation)
        _show(self, "#lyric-upcoming", self.upcoming)

    def watch_current(self, value: str) -> None:
        _show(self, "#lyric-current", value)

    def watch_translation(self, value: str) -> None:
        _show(self, "#lyric-translation", value)

    def watch_upcoming(self, value: str) -> None:
        _show(self, "#lyric-upcoming", value)


class HelpBar(Static):
    """Widget displaying keyboard shortcuts."""

    DEFAULT_CSS = """
    HelpBar {
        height: 1;
        dock: bottom;
        background: $surface;
        color: $text-muted;
        padding: 0 1;
    }
    """

    def compose(self) -> ComposeResult:
        yield Static("[Space] Play/Pause  [n/p] Track  [q] Quit")
