"""
The '!spotify <link>' chat command: permission check, resolution, length limit,
dispatch and the user-facing replies.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import List, Protocol

from rich.markup import escape

from spotify_queue.exceptions import SpotifyQueueError
from spotify_queue.models.dispatch import DispatchItem
from spotify_queue.models.track import (
    DEFAULT_PACING_INTERVAL,
    DispatchBatch,
    ResourceKind,
    TrackDescriptor,
)
from spotify_queue.utils.links import parse_spotify_link

log = logging.getLogger(__name__)

Reply = Callable[[str], Awaitable[None]]

COMMAND_PREFIX = "!spotify"

# What the error reply says was being fetched, per kind.
_FETCH_LABELS = {
    ResourceKind.PLAYLIST: "playlist tracks",
    ResourceKind.ALBUM: "album tracks",
    ResourceKind.TRACK: "track",
    ResourceKind.ARTIST: "artist top tracks",
}


class CatalogResolver(Protocol):
    async def resolve(
        self, identifier: str, kind: ResourceKind
    ) -> List[TrackDescriptor]: ...


class Dispatcher(Protocol):
    def dispatch(self, batch: DispatchBatch) -> List[DispatchItem]: ...


def has_permission(user_groups: Iterable[str], allowed_groups: Iterable[str]) -> bool:
    """An empty allow-list means everyone may use the command."""
    allowed = {str(g) for g in allowed_groups}
    if not allowed:
        return True
    return any(str(g) in allowed for g in user_groups)


class SpotifyCommandHandler:
    """Handles chat lines starting with '!spotify'."""

    def __init__(
        self,
        catalog: CatalogResolver,
        scheduler: Dispatcher,
        playlist_length_limit: int,
        allowed_groups: Iterable[str] = (),
        pacing_interval: float = DEFAULT_PACING_INTERVAL,
    ):
        self.catalog = catalog
        self.scheduler = scheduler
        self.playlist_length_limit = playlist_length_limit
        self.allowed_groups = list(allowed_groups)
        self.pacing_interval = pacing_interval

    async def handle(self, text: str, user_groups: Iterable[str], reply: Reply) -> bool:
        """
        Processes one chat line.

        Returns:
            False if the line is not a '!spotify' command, True otherwise.
        """
        parts = text.split()
        if not parts or parts[0] != COMMAND_PREFIX:
            return False

        if not has_permission(user_groups, self.allowed_groups):
            await reply("You don't have permission to use this command")
            return True

        if len(parts) < 2:
            await reply(f"Usage: {COMMAND_PREFIX} <spotifyLink>")
            return True

        link = parse_spotify_link(parts[1])
        if link is None:
            await reply("Unsupported link")
            return True

        try:
            tracks = await self.catalog.resolve(link.id, link.kind)
        except SpotifyQueueError as e:
            label = _FETCH_LABELS[link.kind]
            log.error(
                f"Error while getting {label}: {escape(str(e))}, "
                f"id: {escape(link.id)}"
            )
            await reply(f"Error while getting {label}: {e}, id: {link.id}")
            return True

        await self._queue(link.kind, link.id, tracks, reply)
        return True

    async def _queue(
        self,
        kind: ResourceKind,
        resource_id: str,
        tracks: List[TrackDescriptor],
        reply: Reply,
    ) -> None:
        if not tracks:
            await reply(f"No tracks found for {kind.value} {resource_id}")
            return

        if len(tracks) > self.playlist_length_limit:
            await reply(
                f"{kind.value.capitalize()} is too long, "
                f"max length is {self.playlist_length_limit}"
            )
            return

        self.scheduler.dispatch(
            DispatchBatch(tracks=tuple(tracks), interval=self.pacing_interval)
        )

        if kind is ResourceKind.TRACK:
            track = tracks[0]
            await reply(f"Adding {track.name} by {track.artist} to queue")
        elif kind is ResourceKind.ARTIST:
            await reply(f"Adding {len(tracks)} songs from {tracks[0].artist} to queue")
        else:
            await reply(f"Adding {len(tracks)} songs to queue")
