from __future__ import annotations

import pytest

from conftest import API_URL, TOKEN_URL, FakeSession, track_json
from spotify_queue.api.client import SpotifyCatalogClient, to_descriptor
from spotify_queue.exceptions import AuthError, CatalogError
from spotify_queue.models.track import ResourceKind, TrackDescriptor


@pytest.fixture(autouse=True)
def _token(session: FakeSession) -> None:
    session.add_token("bearer-1")


@pytest.mark.asyncio
async def test_playlist_items_are_unwrapped_and_invalid_ones_dropped(
    catalog: SpotifyCatalogClient, session: FakeSession
) -> None:
    session.add(
        "GET",
        f"{API_URL}/playlists/PL1/tracks",
        payload={
            "items": [
                {"track": track_json("One", "Artist A", "Artist B")},
                {"track": None},
                {"track": track_json(None, "No Name")},
                {"track": track_json("No Artists")},
                {"track": {"name": "Missing Artists Key"}},
                None,
                {"track": track_json("Two", "Artist C")},
                {"track": track_json("One", "Artist A")},
            ]
        },
    )

    tracks = await catalog.resolve("PL1", ResourceKind.PLAYLIST)

    assert tracks == [
        TrackDescriptor("One", "Artist A"),
        TrackDescriptor("Two", "Artist C"),
        TrackDescriptor("One", "Artist A"),
    ]


@pytest.mark.asyncio
async def test_album_items_are_tracks_directly(
    catalog: SpotifyCatalogClient, session: FakeSession
) -> None:
    session.add(
        "GET",
        f"{API_URL}/albums/AL1/tracks",
        payload={
            "items": [
                track_json("Intro", "Band"),
                track_json("", "Band"),
                {"name": "Outro", "artists": []},
                track_json("Finale", "Band", "Guest"),
            ]
        },
    )

    tracks = await catalog.resolve("AL1", ResourceKind.ALBUM)

    assert [t.name for t in tracks] == ["Intro", "Finale"]
    assert all(t.artist == "Band" for t in tracks)


@pytest.mark.asyncio
async def test_artist_top_tracks_use_fixed_market(
    catalog: SpotifyCatalogClient, session: FakeSession
) -> None:
    url = f"{API_URL}/artists/AR1/top-tracks"
    session.add(
        "GET",
        url,
        payload={"tracks": [track_json("Hit", "Star"), track_json(None, "Star")]},
    )

    tracks = await catalog.resolve("AR1", ResourceKind.ARTIST)

    assert tracks == [TrackDescriptor("Hit", "Star")]
    assert session.calls_to(url)[0].kwargs["params"] == {"market": "US"}


@pytest.mark.asyncio
async def test_artist_without_valid_tracks_resolves_empty(
    catalog: SpotifyCatalogClient, session: FakeSession
) -> None:
    session.add("GET", f"{API_URL}/artists/XYZ/top-tracks", payload={"tracks": []})

    assert await catalog.resolve("XYZ", ResourceKind.ARTIST) == []


@pytest.mark.asyncio
async def test_single_track(catalog: SpotifyCatalogClient, session: FakeSession) -> None:
    session.add("GET", f"{API_URL}/tracks/ABC123", payload=track_json("Song", "Artist"))

    tracks = await catalog.resolve("ABC123", ResourceKind.TRACK)

    assert tracks == [TrackDescriptor("Song", "Artist")]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        track_json(None, "Artist"),
        track_json("Song"),
        {"name": "Song"},
    ],
)
async def test_single_track_without_name_or_artist_fails(
    catalog: SpotifyCatalogClient, session: FakeSession, payload: dict
) -> None:
    session.add("GET", f"{API_URL}/tracks/BAD", payload=payload)

    with pytest.raises(CatalogError):
        await catalog.resolve("BAD", ResourceKind.TRACK)


@pytest.mark.asyncio
async def test_requests_carry_bearer_token(
    catalog: SpotifyCatalogClient, session: FakeSession
) -> None:
    url = f"{API_URL}/tracks/T1"
    session.add("GET", url, payload=track_json("Song", "Artist"))

    await catalog.resolve("T1", ResourceKind.TRACK)

    call = session.calls_to(url)[0]
    assert call.kwargs["headers"]["Authorization"] == "Bearer bearer-1"
    assert call.kwargs["timeout"].total == 10


@pytest.mark.asyncio
async def test_non_200_fails_whole_resolution(
    catalog: SpotifyCatalogClient, session: FakeSession
) -> None:
    session.add(
        "GET", f"{API_URL}/playlists/GONE/tracks", status=404, body="Not found"
    )

    with pytest.raises(CatalogError) as excinfo:
        await catalog.resolve("GONE", ResourceKind.PLAYLIST)

    assert excinfo.value.status == 404
    assert excinfo.value.body == "Not found"


@pytest.mark.asyncio
async def test_malformed_payload_is_a_catalog_error(
    catalog: SpotifyCatalogClient, session: FakeSession
) -> None:
    session.add("GET", f"{API_URL}/albums/AL2/tracks", payload={"unexpected": True})

    with pytest.raises(CatalogError, match="malformed|Malformed"):
        await catalog.resolve("AL2", ResourceKind.ALBUM)


@pytest.mark.asyncio
async def test_non_json_body_is_a_catalog_error(
    catalog: SpotifyCatalogClient, session: FakeSession
) -> None:
    session.add("GET", f"{API_URL}/albums/AL3/tracks", body="<html>oops</html>")

    with pytest.raises(CatalogError):
        await catalog.resolve("AL3", ResourceKind.ALBUM)


@pytest.mark.asyncio
async def test_auth_failure_propagates(store, clock) -> None:
    failing = FakeSession()
    failing.add("POST", TOKEN_URL, status=401, body="bad credentials")
    client = SpotifyCatalogClient("id", "secret", store, now=clock, session=failing)

    with pytest.raises(AuthError):
        await client.resolve("PL1", ResourceKind.PLAYLIST)

    assert all(c.url == TOKEN_URL for c in failing.calls)


def test_to_descriptor_uses_first_artist_only() -> None:
    assert to_descriptor(track_json("Song", "Lead", "Feat")) == TrackDescriptor(
        "Song", "Lead"
    )
    assert to_descriptor({"name": "Song", "artists": [{"id": "x"}]}) is None
    assert to_descriptor("not a track") is None


@pytest.mark.asyncio
async def test_close_closes_owned_session(
    catalog: SpotifyCatalogClient, session: FakeSession
) -> None:
    await catalog.close()

    assert session.closed
