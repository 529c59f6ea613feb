"""
Finds a playable YouTube video for a track using the YouTube Data API search endpoint.
"""

import asyncio
import logging
from typing import Optional

import aiohttp
from rich.markup import escape

from spotify_queue.exceptions import MediaLookupError
from spotify_queue.models.track import TrackDescriptor

log = logging.getLogger(__name__)


class YouTubeSearchClient:
    """Maps track descriptors to YouTube watch URLs, one search request per track."""

    SEARCH_URL = "https://www.googleapis.com/youtube/v3/search"
    WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
    TIMEOUT = aiohttp.ClientTimeout(total=10)

    def __init__(self, api_key: str, session: Optional[aiohttp.ClientSession] = None):
        self.api_key = api_key
        self._session = session

    async def get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def find_media(self, track: TrackDescriptor) -> str:
        """
        Returns the watch URL of the first video matching "<name> <artist>".

        Raises:
            MediaLookupError: On a non-200 status, a failed request or no results.
        """
        session = await self.get_session()
        params = {
            "part": "snippet",
            "maxResults": "1",
            "q": f"{track.name} {track.artist}",
            "type": "video",
            "key": self.api_key,
        }

        try:
            async with session.get(
                self.SEARCH_URL, params=params, timeout=self.TIMEOUT
            ) as r:
                if r.status != 200:
                    raise MediaLookupError(
                        f"Got response {r.status} from YouTube", status=r.status
                    )
                payload = await r.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise MediaLookupError(f"YouTube search failed: {e}") from e

        items = payload.get("items") if isinstance(payload, dict) else None
        if not items:
            raise MediaLookupError("not found")

        first = items[0] if isinstance(items[0], dict) else {}
        video_id = (first.get("id") or {}).get("videoId")
        if not video_id:
            raise MediaLookupError("not found")

        log.debug(f"Found video {video_id} for '{escape(str(track))}'.")
        return self.WATCH_URL.format(video_id=video_id)
