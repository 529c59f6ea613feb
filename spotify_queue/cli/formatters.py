"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from spotify_queue.models.config import QueueConfig

SECRET_KEYS = ("youtube_api_key", "spotify_client_secret")


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "AuthError": [
            "• Verify the Spotify client id and secret in the configuration file.",
            "• Check that your system clock is correct.",
            "• Run `spotify-queue --clear-token` to force a new access token.",
        ],
        "CatalogError": [
            "• Make sure the link points at a public playlist, album, track or artist.",
            "• The Spotify Web API might be temporarily unavailable.",
        ],
        "MediaLookupError": [
            "• Verify the YouTube API key in the configuration file.",
            "• Your daily YouTube Data API quota may be exhausted.",
        ],
        "ConfigurationError": [
            "• Run `spotify-queue init` to create a configuration file.",
            "• Run `spotify-queue validate` to see what is wrong.",
        ],
        "ClientResponseError": [
            "• A network connection issue occurred.",
            "• Please try again in a few minutes.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration, hiding sensitive data."""
    console = Console()
    content = ""
    for key, value in config_data.items():
        if key in SECRET_KEYS and value:
            value = "********"
        elif isinstance(value, list):
            value = ", ".join(value)
        content += f"{key} = {escape(str(value))}\n"

    console.print(
        Panel(
            content.strip(),
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_validation_table(config: QueueConfig):
    """Displays a summary of the current settings."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    groups = ", ".join(config.allowed_groups) or "[dim]everyone[/dim]"
    table.add_row("Spotify Client ID:", f"[green]{config.spotify_client_id}[/green]")
    table.add_row("YouTube API Key:", "[green]✓ Set[/green]")
    table.add_row("Length Limit:", str(config.playlist_length_limit))
    table.add_row("Pacing Interval:", f"{config.pacing_interval:g}s")
    table.add_row("Allowed Groups:", groups)
    table.add_row("M3U Playlist:", config.m3u_path or "[dim]disabled[/dim]")

    console.print(
        Panel(
            table,
            title="[bold green]✓ Validated Settings[/bold green]",
            border_style="green",
        )
    )
