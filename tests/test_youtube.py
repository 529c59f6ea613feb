from __future__ import annotations

import asyncio

import pytest

from conftest import FakeSession
from spotify_queue.api.youtube import YouTubeSearchClient
from spotify_queue.exceptions import MediaLookupError
from spotify_queue.models.track import TrackDescriptor

SEARCH_URL = YouTubeSearchClient.SEARCH_URL


@pytest.fixture
def youtube(session: FakeSession) -> YouTubeSearchClient:
    return YouTubeSearchClient("yt-key", session=session)


@pytest.mark.asyncio
async def test_first_result_becomes_watch_url(
    youtube: YouTubeSearchClient, session: FakeSession
) -> None:
    session.add(
        "GET",
        SEARCH_URL,
        payload={"items": [{"id": {"kind": "youtube#video", "videoId": "dQw4w9WgXcQ"}}]},
    )

    url = await youtube.find_media(TrackDescriptor("Never Gonna Give You Up", "Rick Astley"))

    assert url == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
    params = session.calls[0].kwargs["params"]
    assert params["q"] == "Never Gonna Give You Up Rick Astley"
    assert params["maxResults"] == "1"
    assert params["type"] == "video"
    assert params["key"] == "yt-key"


@pytest.mark.asyncio
async def test_non_200_is_a_lookup_error_with_status(
    youtube: YouTubeSearchClient, session: FakeSession
) -> None:
    session.add("GET", SEARCH_URL, status=403, body='{"error": "quotaExceeded"}')

    with pytest.raises(MediaLookupError) as excinfo:
        await youtube.find_media(TrackDescriptor("Song", "Artist"))

    assert excinfo.value.status == 403


@pytest.mark.asyncio
async def test_no_results_is_not_found(
    youtube: YouTubeSearchClient, session: FakeSession
) -> None:
    session.add("GET", SEARCH_URL, payload={"items": []})

    with pytest.raises(MediaLookupError, match="not found"):
        await youtube.find_media(TrackDescriptor("Obscure", "Nobody"))


@pytest.mark.asyncio
async def test_timeout_is_a_lookup_error(
    youtube: YouTubeSearchClient, session: FakeSession
) -> None:
    session.add("GET", SEARCH_URL, error=asyncio.TimeoutError())

    with pytest.raises(MediaLookupError):
        await youtube.find_media(TrackDescriptor("Song", "Artist"))
