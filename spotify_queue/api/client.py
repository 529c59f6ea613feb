"""
Async client for the Spotify Web API that resolves playlists, albums, tracks and
artists into flat lists of track descriptors.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Any, Dict, List, Optional

import aiohttp
from rich.markup import escape

from spotify_queue.exceptions import CatalogError
from spotify_queue.models.track import ResourceKind, TrackDescriptor
from spotify_queue.storage.store import KeyValueStore

from .auth import CredentialCache

log = logging.getLogger(__name__)


def to_descriptor(track: Any) -> Optional[TrackDescriptor]:
    """
    Maps a Spotify track object to a descriptor using its first artist.

    Returns None when the track has no name, no artist list, an empty artist
    list, or a first artist without a name.
    """
    if not isinstance(track, dict):
        return None
    name = track.get("name")
    artists = track.get("artists")
    if not name or not isinstance(artists, list) or not artists:
        return None
    first = artists[0]
    artist = first.get("name") if isinstance(first, dict) else None
    if not artist:
        return None
    return TrackDescriptor(name=str(name), artist=str(artist))


def collect_descriptors(items: List[Any]) -> List[TrackDescriptor]:
    """Maps a list of track objects, silently dropping the invalid ones."""
    tracks = []
    for item in items:
        descriptor = to_descriptor(item)
        if descriptor is None:
            log.debug(
                f"Skipping catalog entry without name or artist: {escape(repr(item))}"
            )
            continue
        tracks.append(descriptor)
    return tracks


class SpotifyCatalogClient:
    """
    Async client for the Spotify Web API (v1).

    Every request is authorized with a bearer token from the shared
    CredentialCache. Any non-200 response fails the whole resolution; there
    are no partial results.
    """

    BASE_URL = "https://api.spotify.com/v1"
    ARTIST_MARKET = "US"
    TIMEOUT = aiohttp.ClientTimeout(total=10)

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        store: KeyValueStore,
        now: Optional[Callable[[], int]] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initializes the API client.

        Args:
            client_id: Spotify application client id.
            client_secret: Spotify application client secret.
            store: Durable storage for the cached access token.
            now: Clock returning epoch milliseconds, passed to the credential cache.
            session: An existing HTTP session to reuse instead of creating one.
        """
        self._session = session
        self._credentials = CredentialCache(
            self, client_id, client_secret, store, now=now
        )

    @property
    def credentials(self) -> CredentialCache:
        """Provides access to the token cache."""
        return self._credentials

    async def get_session(self) -> aiohttp.ClientSession:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"Accept": "application/json"},
            )
        return self._session

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def api_call(
        self, endpoint: str, params: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """
        Makes an authenticated GET request and returns the decoded JSON body.

        Raises:
            AuthError: If no access token could be obtained.
            CatalogError: On a non-200 status, a network failure or a non-JSON body.
        """
        token = await self._credentials.get_token()
        session = await self.get_session()
        url = f"{self.BASE_URL}/{endpoint}"

        try:
            async with session.get(
                url,
                params=params,
                headers={
                    "Accept": "application/json",
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {token.value}",
                },
                timeout=self.TIMEOUT,
            ) as r:
                if r.status != 200:
                    body = await r.text()
                    log.warning(f"Received invalid status from spotify: {r.status}")
                    raise CatalogError(
                        f"Received invalid status from spotify: {r.status} {body}",
                        status=r.status,
                        body=body,
                    )
                payload = await r.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            log.debug(f"API call to {endpoint} failed: {e}")
            raise CatalogError(f"Request to spotify failed: {e}") from e
        except ValueError as e:
            raise CatalogError(f"Malformed response from spotify: {e}") from e

        if not isinstance(payload, dict):
            raise CatalogError(f"Malformed response from spotify for {endpoint}")
        return payload

    async def _fetch_list(
        self, endpoint: str, list_key: str, params: Optional[Dict[str, str]] = None
    ) -> List[Any]:
        payload = await self.api_call(endpoint, params)
        items = payload.get(list_key)
        if not isinstance(items, list):
            raise CatalogError(
                f"Malformed response from spotify: '{list_key}' missing for {endpoint}"
            )
        return items

    # Public API Methods
    async def fetch_playlist_tracks(self, playlist_id: str) -> List[TrackDescriptor]:
        items = await self._fetch_list(f"playlists/{playlist_id}/tracks", "items")
        return collect_descriptors(
            [item.get("track") if isinstance(item, dict) else None for item in items]
        )

    async def fetch_album_tracks(self, album_id: str) -> List[TrackDescriptor]:
        items = await self._fetch_list(f"albums/{album_id}/tracks", "items")
        return collect_descriptors(items)

    async def fetch_artist_top_tracks(self, artist_id: str) -> List[TrackDescriptor]:
        items = await self._fetch_list(
            f"artists/{artist_id}/top-tracks",
            "tracks",
            params={"market": self.ARTIST_MARKET},
        )
        return collect_descriptors(items)

    async def fetch_track(self, track_id: str) -> TrackDescriptor:
        """Fetches a single track. A track without name or artist is an error."""
        payload = await self.api_call(f"tracks/{track_id}")
        descriptor = to_descriptor(payload)
        if descriptor is None:
            raise CatalogError(f"Track {track_id} has no name or artist")
        return descriptor

    async def resolve(
        self, identifier: str, kind: ResourceKind
    ) -> List[TrackDescriptor]:
        """
        Resolves a Spotify resource into its tracks, in catalog order.

        Args:
            identifier: The Spotify id of the resource.
            kind: Which kind of resource the id refers to.
        """
        if kind is ResourceKind.PLAYLIST:
            tracks = await self.fetch_playlist_tracks(identifier)
        elif kind is ResourceKind.ALBUM:
            tracks = await self.fetch_album_tracks(identifier)
        elif kind is ResourceKind.TRACK:
            tracks = [await self.fetch_track(identifier)]
        elif kind is ResourceKind.ARTIST:
            tracks = await self.fetch_artist_top_tracks(identifier)
        else:
            raise ValueError(f"Unknown resource kind: {kind!r}")

        log.debug(f"Resolved {kind.value} {identifier} into {len(tracks)} tracks.")
        return tracks
