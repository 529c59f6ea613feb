"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from spotify_queue import __version__
from spotify_queue.api.client import SpotifyCatalogClient
from spotify_queue.api.youtube import YouTubeSearchClient
from spotify_queue.core.command import COMMAND_PREFIX, SpotifyCommandHandler
from spotify_queue.core.scheduler import DispatchScheduler
from spotify_queue.exceptions import SpotifyQueueError
from spotify_queue.media.queue import ConsoleQueueSink, FanOutQueueSink, M3UQueueSink
from spotify_queue.storage.config_manager import ConfigManager
from spotify_queue.storage.store import JsonKeyValueStore
from spotify_queue.utils.structured_logger import create_structured_logger

from .formatters import print_config, print_validation_table

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("spotify_queue")

app = typer.Typer(
    name="spotify-queue",
    help=(
        "Queue Spotify playlists, albums, tracks and artists as YouTube videos."
        " Use 'spotify-queue <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "spotify-queue"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def clear_cached_token() -> None:
    """Forgets the stored Spotify access token without touching other stored values."""
    store = JsonKeyValueStore(CONFIG_DIR)
    SpotifyCatalogClient("", "", store).credentials.invalidate()


def build_cli_options(
    limit: int | None = None, interval: float | None = None
) -> dict[str, Any]:
    """Collects the command-line overrides that were actually given."""
    return {
        key: value
        for key, value in {
            "playlist_length_limit": limit,
            "pacing_interval": interval,
        }.items()
        if value is not None
    }


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
    clear_token: bool = typer.Option(
        False, "--clear-token", help="Forget the cached Spotify access token and exit."
    ),
):
    """Spotify to YouTube queue CLI"""
    if version:
        console.print(f"[bold]spotify-queue[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("spotify_queue").setLevel(log_level)

    if clear_token:
        clear_cached_token()
        console.print("[green]✓ Cached access token cleared.[/green]")
        raise typer.Exit()

    if show_config:
        if not CONFIG_FILE.is_file():
            console.print(
                "[red]✗ Config file not found.[/] Run [cyan]spotify-queue init[/cyan]"
                " first."
            )
            raise typer.Exit(code=1)
        print_config(CONFIG_FILE, ConfigManager(CONFIG_FILE).read())
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    youtube_api_key: str = typer.Option(
        ..., "--youtube-api-key", prompt=True, hide_input=True, help="YouTube API key."
    ),
    client_id: str = typer.Option(
        ..., "--client-id", prompt="Spotify client ID", help="Spotify client ID."
    ),
    client_secret: str = typer.Option(
        ...,
        "--client-secret",
        prompt="Spotify client secret",
        hide_input=True,
        help="Spotify client secret.",
    ),
    limit: int = typer.Option(
        100, "--limit", "-l", help="Maximum number of tracks queued per command."
    ),
    groups: list[str] = typer.Option(  # noqa: B008
        [], "--group", "-g", help="Group allowed to use the command (repeatable)."
    ),
    m3u_path: str = typer.Option(
        "", "--m3u", help="Also append queued URLs to this M3U playlist file."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing configuration."
    ),
):
    """Initialize configuration with Spotify and YouTube credentials."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    settings = {
        "youtube_api_key": youtube_api_key,
        "spotify_client_id": client_id,
        "spotify_client_secret": client_secret,
        "playlist_length_limit": limit,
        "allowed_groups": groups,
        "m3u_path": m3u_path,
    }
    config_manager = ConfigManager(CONFIG_FILE)
    try:
        config_manager.save_new_config(settings)
        config_manager.load_config()
    except SpotifyQueueError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    console.print(f"\n[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")
    console.print(
        "Ready! Try: [cyan]spotify-queue queue https://open.spotify.com/track/...[/cyan]"
    )


async def run_chat_line(
    text: str,
    groups: list[str],
    json_logs: bool,
    cli_options: dict[str, Any] | None = None,
) -> bool:
    """Runs one chat line through the command handler and waits for its lookups."""
    config = ConfigManager(CONFIG_FILE).load_config(cli_options)

    store = JsonKeyValueStore(CONFIG_DIR)
    catalog = SpotifyCatalogClient(
        config.spotify_client_id, config.spotify_client_secret, store
    )
    youtube = YouTubeSearchClient(config.youtube_api_key)

    sink = ConsoleQueueSink(console)
    if config.m3u_path:
        sink = FanOutQueueSink(sink, M3UQueueSink(Path(config.m3u_path).expanduser()))

    base_logger, dispatch_logger = create_structured_logger(
        log_dir=CONFIG_DIR / "logs" if json_logs else None, enable_json=json_logs
    )
    scheduler = DispatchScheduler(youtube, sink, dispatch_logger)
    handler = SpotifyCommandHandler(
        catalog,
        scheduler,
        playlist_length_limit=config.playlist_length_limit,
        allowed_groups=config.allowed_groups,
        pacing_interval=config.pacing_interval,
    )

    async def reply(message: str) -> None:
        console.print(f"[bold cyan]»[/bold cyan] {escape(message)}")

    try:
        handled = await handler.handle(text, groups, reply)
        if scheduler.pending:
            console.print(
                f"[dim]Looking up {scheduler.pending} tracks, one every "
                f"{config.pacing_interval:g}s. Press Ctrl+C to stop.[/dim]"
            )
            await scheduler.drain()
        return handled
    finally:
        await catalog.close()
        await youtube.close()
        base_logger.close()


def _run(
    text: str, groups: list[str], json_logs: bool, cli_options: dict[str, Any]
) -> None:
    try:
        handled = asyncio.run(run_chat_line(text, groups, json_logs, cli_options))
    except SpotifyQueueError as e:
        console.print(f"[bold red]Error: {escape(str(e))}[/bold red]")
        raise typer.Exit(code=1) from e
    if not handled:
        console.print(f"[yellow]Not a {COMMAND_PREFIX} command, ignored.[/yellow]")


@app.command(name="queue")
def queue_command(
    link: str = typer.Argument(..., help="A Spotify playlist, album, track or artist link."),
    groups: list[str] = typer.Option(  # noqa: B008
        [], "--group", "-g", help="Group ids of the invoking user (repeatable)."
    ),
    json_logs: bool = typer.Option(
        False, "--json-logs", help="Also write dispatch events as JSONL files."
    ),
    limit: int | None = typer.Option(
        None, "--limit", "-l", help="Override the maximum number of tracks per command."
    ),
    interval: float | None = typer.Option(
        None, "--interval", help="Override the seconds between two YouTube lookups."
    ),
):
    """Queue the tracks behind a Spotify link."""
    _run(
        f"{COMMAND_PREFIX} {link}", groups, json_logs, build_cli_options(limit, interval)
    )


@app.command(name="chat")
def chat_command(
    text: str = typer.Argument(..., help="A raw chat line, e.g. '!spotify <link>'."),
    groups: list[str] = typer.Option(  # noqa: B008
        [], "--group", "-g", help="Group ids of the invoking user (repeatable)."
    ),
    json_logs: bool = typer.Option(
        False, "--json-logs", help="Also write dispatch events as JSONL files."
    ),
    limit: int | None = typer.Option(
        None, "--limit", "-l", help="Override the maximum number of tracks per command."
    ),
    interval: float | None = typer.Option(
        None, "--interval", help="Override the seconds between two YouTube lookups."
    ),
):
    """Pass a raw chat line through the command handler."""
    _run(text, groups, json_logs, build_cli_options(limit, interval))


@app.command()
def validate():
    """Validate the current configuration."""
    try:
        config = ConfigManager(CONFIG_FILE).load_config()
        print_validation_table(config)
    except SpotifyQueueError as e:
        console.print(f"[red]✗ Configuration is invalid: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e
