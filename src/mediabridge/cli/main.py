"""mediabridge CLI main entry point."""

from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path

import click

from ..config import ConfigError, load_config
from . import commands
from .output import print_lyric, print_snapshot


@click.group(invoke_without_command=True)
@click.option("--json", "json_output", is_flag=True, help="Output raw JSON")
@click.option("--tui", is_flag=True, help="Launch TUI")
@click.option("--host", help="Command server host")
@click.option("--port", type=int, help="Command server port")
@click.option(
    "--lyrics",
    "lyrics_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="LRC file to show alongside playback",
)
@click.option(
    "--translation",
    "translation_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="LRC translation merged into --lyrics",
)
@click.pass_context
def cli(
    ctx,
    json_output: bool,
    tui: bool,
    host: str | None,
    port: int | None,
    lyrics_file: Path | None,
    translation_file: Path | None,
):
    """mediabridge - remote media keys and now-playing state

    Sends keycodes to a mediabridge command server and follows the
    snapshots it reports.
    """
    try:
        config = load_config()
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    client = config.client
    if host:
        client = replace(client, host=host)
    if port:
        client = replace(client, port=port)

    ctx.ensure_object(dict)
    ctx.obj["json"] = json_output
    ctx.obj["client"] = client

    try:
        lyrics = commands.make_lyrics_follower(client, lyrics_file, translation_file)
    except (OSError, UnicodeDecodeError) as e:
        raise click.ClickException(f"Cannot read lyrics: {e}") from e
    ctx.obj["lyrics"] = lyrics

    if tui:
        from ..tui.app import main as tui_main

        tui_main(client, lyrics)
        sys.exit(0)

    if ctx.invoked_subcommand is None:
        # Default to status if no command
        ctx.invoke(status)


def _run(ctx, command, *args) -> None:
    client = ctx.obj["client"]
    try:
        command(*args, client)
    except OSError as e:
        raise click.ClickException(f"Cannot reach {client.host}:{client.port}: {e}") from e


# Playback commands


@cli.command("play-pause")
@click.pass_context
def play_pause(ctx):
    """Toggle play/pause."""
    _run(ctx, commands.cmd_play_pause)


@cli.command("next")
@click.pass_context
def next_track(ctx):
    """Skip to next track."""
    _run(ctx, commands.cmd_next)


@cli.command("prev")
@click.pass_context
def prev_track(ctx):
    """Go to previous track."""
    _run(ctx, commands.cmd_prev)


@cli.command("send")
@click.argument("code", type=int)
@click.pass_context
def send(ctx, code: int):
    """Send a raw keycode (85 play/pause, 87 next, 88 previous)."""
    _run(ctx, commands.cmd_send, code)


# State commands


@cli.command("status")
@click.argument("file", required=False, type=click.Path(path_type=Path))
@click.pass_context
def status(ctx, file: Path | None):
    """Show the last reported snapshot."""
    try:
        snapshot = commands.cmd_status(file)
    except FileNotFoundError as e:
        raise click.ClickException(str(e)) from e

    if snapshot is None:
        click.echo("(nothing playing)")
        return
    print_snapshot(snapshot, ctx.obj["json"])


@cli.command("watch")
@click.argument("file", required=False, type=click.Path(path_type=Path))
@click.option("--from-start", is_flag=True, help="Replay the whole file first")
@click.pass_context
def watch(ctx, file: Path | None, from_start: bool):
    """Stream snapshots from a state log, or from stdin if FILE is '-'.

    Without FILE the local daemon's state log is followed.
    """
    json_output = ctx.obj["json"]
    lyrics = ctx.obj["lyrics"]

    if file is None:
        file = commands.get_state_log()
    elif str(file) == "-":
        file = None

    try:
        for snapshot in commands.watch_snapshots(file, from_start=from_start):
            print_snapshot(snapshot, json_output)
            if lyrics is not None and (line := lyrics.update(snapshot)) is not None:
                print_lyric(line, json_output)
    except KeyboardInterrupt:
        pass


# Daemon commands


@cli.command("daemon")
def daemon():
    """Run the daemon in the foreground."""
    from ..daemon.main import main as daemon_main

    daemon_main()


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
