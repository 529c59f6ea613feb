"""
Value types shared by the resolver, the media lookup and the dispatch scheduler.
"""

from dataclasses import dataclass
from enum import Enum

DEFAULT_PACING_INTERVAL = 20.0


class ResourceKind(Enum):
    """The kind of Spotify resource a link points at."""

    PLAYLIST = "playlist"
    ALBUM = "album"
    TRACK = "track"
    ARTIST = "artist"


@dataclass(frozen=True)
class SpotifyLink:
    """A parsed Spotify web link."""

    kind: ResourceKind
    id: str


@dataclass(frozen=True)
class TrackDescriptor:
    """A track reduced to the two fields needed to search for it."""

    name: str
    artist: str

    def __str__(self) -> str:
        return f"{self.name} - {self.artist}"


@dataclass(frozen=True)
class AccessToken:
    """A bearer token for the Spotify Web API and its expiry in epoch milliseconds."""

    value: str
    expires_at: int


@dataclass(frozen=True)
class DispatchBatch:
    """An ordered set of tracks to be looked up one interval apart."""

    tracks: tuple[TrackDescriptor, ...]
    interval: float = DEFAULT_PACING_INTERVAL

    def __len__(self) -> int:
        return len(self.tracks)
