from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

from spotify_queue.api.client import SpotifyCatalogClient
from spotify_queue.storage.store import JsonKeyValueStore

TOKEN_URL = "https://accounts.spotify.com/api/token"
API_URL = "https://api.spotify.com/v1"


class FakeResponse:
    def __init__(
        self,
        status: int = 200,
        payload: Any = None,
        body: str | None = None,
        error: BaseException | None = None,
    ) -> None:
        self.status = status
        self._body = body if body is not None else json.dumps(payload)
        self._error = error

    async def __aenter__(self) -> "FakeResponse":
        # Yield like a real network round trip would.
        await asyncio.sleep(0)
        if self._error is not None:
            raise self._error
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        return False

    async def text(self) -> str:
        return self._body

    async def json(self, content_type: str | None = "application/json") -> Any:
        return json.loads(self._body)


@dataclass
class FakeCall:
    method: str
    url: str
    kwargs: dict[str, Any] = field(default_factory=dict)


class FakeSession:
    """Stands in for aiohttp.ClientSession; routes are matched on method and URL."""

    def __init__(self) -> None:
        self.closed = False
        self.calls: list[FakeCall] = []
        self._routes: dict[tuple[str, str], list[FakeResponse]] = {}

    def add(self, method: str, url: str, **response: Any) -> None:
        self._routes.setdefault((method, url), []).append(FakeResponse(**response))

    def add_token(self, token: str = "tok-1", expires_in: int = 3600) -> None:
        self.add(
            "POST", TOKEN_URL, payload={"access_token": token, "expires_in": expires_in}
        )

    def calls_to(self, url: str) -> list[FakeCall]:
        return [c for c in self.calls if c.url == url]

    def _request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append(FakeCall(method, url, kwargs))
        queue = self._routes.get((method, url))
        if not queue:
            raise AssertionError(f"Unexpected request: {method} {url}")
        # The last registered response keeps answering.
        return queue.pop(0) if len(queue) > 1 else queue[0]

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._request("POST", url, **kwargs)

    async def close(self) -> None:
        self.closed = True


class FakeClock:
    """Epoch-millisecond clock under test control."""

    def __init__(self, start_ms: int = 1_700_000_000_000) -> None:
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


def track_json(name: str | None, *artists: str) -> dict[str, Any]:
    payload: dict[str, Any] = {"artists": [{"name": a} for a in artists]}
    if name is not None:
        payload["name"] = name
    return payload


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(tmp_path: Path) -> JsonKeyValueStore:
    return JsonKeyValueStore(tmp_path)


@pytest.fixture
def catalog(
    session: FakeSession, store: JsonKeyValueStore, clock: FakeClock
) -> SpotifyCatalogClient:
    return SpotifyCatalogClient("client-id", "client-secret", store, now=clock, session=session)
