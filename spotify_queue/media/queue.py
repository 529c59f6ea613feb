"""
Queue sinks: where resolved YouTube URLs end up once a lookup succeeds.
"""

import asyncio
import logging
from pathlib import Path
from typing import Protocol

from rich.console import Console
from rich.markup import escape

log = logging.getLogger(__name__)


class QueueSink(Protocol):
    """Accepts one playable URL. The return value is never consumed."""

    async def enqueue(self, url: str) -> None: ...


class ConsoleQueueSink:
    """Prints each queued URL to the console."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    async def enqueue(self, url: str) -> None:
        self.console.print(f"[green]♪ Queued[/green] [link={url}]{escape(url)}[/link]")


class M3UQueueSink:
    """
    Appends each queued URL to an extended M3U playlist file so an external
    player can pick the queue up.
    """

    def __init__(self, playlist_path: Path):
        self.playlist_path = playlist_path

    def _append(self, url: str) -> None:
        self.playlist_path.parent.mkdir(parents=True, exist_ok=True)
        is_new = not self.playlist_path.is_file() or self.playlist_path.stat().st_size == 0
        with open(self.playlist_path, "a", encoding="utf-8") as f:
            if is_new:
                f.write("#EXTM3U\n")
            f.write(f"#EXTINF:-1,{url}\n{url}\n")

    async def enqueue(self, url: str) -> None:
        await asyncio.to_thread(self._append, url)
        log.debug(f"Appended {url} to '{self.playlist_path}'")


class FanOutQueueSink:
    """Hands each URL to several sinks in order."""

    def __init__(self, *sinks: QueueSink):
        self.sinks = sinks

    async def enqueue(self, url: str) -> None:
        for sink in self.sinks:
            await sink.enqueue(url)
