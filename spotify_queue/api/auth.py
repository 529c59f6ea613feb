"""
Handles authentication with the Spotify Web API using the client-credentials flow,
caching the bearer token in durable storage until shortly before it expires.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Optional

import aiohttp

from spotify_queue.exceptions import AuthError
from spotify_queue.models.track import AccessToken
from spotify_queue.storage.store import KeyValueStore

if TYPE_CHECKING:
    from .client import SpotifyCatalogClient

log = logging.getLogger(__name__)

TOKEN_KEY = "spotifyAccessToken"
TOKEN_EXPIRES_KEY = "spotifyAccessTokenExpires"
TOKEN_SAFETY_MARGIN_MS = 5000


def epoch_millis() -> int:
    """Wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class CredentialCache:
    """
    Owns the process-wide Spotify access token.

    The token is refreshed lazily: callers always go through get_token(), which
    only talks to the accounts service when the stored token is missing or
    within the safety margin of its expiry. The token lives in memory; the
    store is read until a token is found and written through on every
    refresh, always off the event loop. There is no lock around refreshes;
    two concurrent callers may both refresh and the last write wins.
    """

    TOKEN_URL = "https://accounts.spotify.com/api/token"
    TIMEOUT = aiohttp.ClientTimeout(total=2)

    def __init__(
        self,
        api_client: "SpotifyCatalogClient",
        client_id: str,
        client_secret: str,
        store: KeyValueStore,
        now: Optional[Callable[[], int]] = None,
    ):
        """
        Initializes the credential cache.

        Args:
            api_client: The catalog client whose HTTP session is used for the exchange.
            client_id: Spotify application client id.
            client_secret: Spotify application client secret.
            store: Durable key-value storage for the token and its expiry.
            now: Clock returning epoch milliseconds. Defaults to the wall clock.
        """
        self._api_client = api_client
        self._client_id = client_id
        self._client_secret = client_secret
        self._store = store
        self._now = now or epoch_millis
        self._token: Optional[AccessToken] = None

    def _stored_token(self) -> Optional[AccessToken]:
        value = self._store.get(TOKEN_KEY)
        expires_at = self._store.get(TOKEN_EXPIRES_KEY)
        if not value or not isinstance(expires_at, (int, float)):
            return None
        return AccessToken(value=str(value), expires_at=int(expires_at))

    async def get_token(self) -> AccessToken:
        """
        Returns a usable access token, refreshing it if needed.

        Raises:
            AuthError: If the token exchange fails or the system clock is invalid.
        """
        if self._token is None:
            self._token = await asyncio.to_thread(self._stored_token)

        token = self._token
        if token and token.expires_at > self._now() + TOKEN_SAFETY_MARGIN_MS:
            return token
        return await self.refresh()

    async def refresh(self) -> AccessToken:
        """Performs the client-credentials exchange and persists the new token."""
        log.debug("Requesting a new Spotify access token...")
        session = await self._api_client.get_session()
        form = {
            "grant_type": "client_credentials",
            "client_id": self._client_id,
            "client_secret": self._client_secret,
        }

        try:
            async with session.post(
                self.TOKEN_URL,
                data=form,
                headers={"Accept": "application/json"},
                timeout=self.TIMEOUT,
            ) as r:
                if r.status != 200:
                    body = await r.text()
                    log.error(f"Received invalid status from spotify auth: {r.status}")
                    raise AuthError(
                        f"Received invalid status from spotify auth: {r.status} {body}",
                        status=r.status,
                        body=body,
                    )
                payload: dict[str, Any] = await r.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise AuthError(f"Spotify token request failed: {e}") from e

        try:
            access_token = str(payload["access_token"])
            expires_in = int(payload["expires_in"])
        except (KeyError, TypeError, ValueError) as e:
            raise AuthError(f"Malformed token response from spotify: {payload}") from e

        issued_at = self._now()
        token = AccessToken(value=access_token, expires_at=issued_at + expires_in * 1000)
        self._token = token
        await asyncio.to_thread(self._persist, token)

        if token.expires_at <= self._now():
            log.error(
                f"Invalid system time {issued_at}, token expires at {token.expires_at}"
            )
            raise AuthError("system clock invalid")

        log.debug(f"Spotify access token valid for {expires_in}s.")
        return token

    def _persist(self, token: AccessToken) -> None:
        self._store.set(TOKEN_KEY, token.value)
        self._store.set(TOKEN_EXPIRES_KEY, token.expires_at)

    def invalidate(self) -> None:
        """Forgets the stored token so the next call performs a fresh exchange."""
        self._token = None
        self._store.delete(TOKEN_KEY)
        self._store.delete(TOKEN_EXPIRES_KEY)
