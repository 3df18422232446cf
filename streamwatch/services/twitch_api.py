"""Twitch Helix API client.

Only public endpoints are used, so an App Access Token from the
client-credentials flow is enough. The token is fetched lazily, cached,
and refreshed five minutes before Twitch says it expires.
"""

import asyncio
import logging
import time
from typing import Any, cast

import httpx

from ..core.errors import TwitchAPIError

logger = logging.getLogger(__name__)

HELIX_BASE = "https://api.twitch.tv/helix"
OAUTH_BASE = "https://id.twitch.tv/oauth2"

# Helix maximum page size for /streams
STREAMS_PAGE_SIZE = 100


class TwitchAPIClient:
    """Client for the Helix endpoints the notifier needs.

    Manages a shared httpx client for connection reuse and caches
    the app access token to avoid redundant token requests.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        *,
        http: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ):
        if not client_id or not client_secret:
            raise ValueError("Twitch client_id and client_secret are required")

        self.client_id = client_id
        self.client_secret = client_secret

        # Shared HTTP client, reuses TCP connections across requests
        self._http = http or httpx.AsyncClient(timeout=timeout)

        # App token cache
        self._app_token: str | None = None
        self._app_token_expires_at: float = 0.0
        self._app_token_lock = asyncio.Lock()

    async def close(self) -> None:
        """Close the shared HTTP client. Call on shutdown."""
        await self._http.aclose()

    async def __aenter__(self) -> "TwitchAPIClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _app_headers(self, token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}", "Client-Id": self.client_id}

    def invalidate_app_token(self) -> None:
        self._app_token = None
        self._app_token_expires_at = 0.0

    async def _ensure_app_token(self) -> str:
        """Return a cached app access token, refreshing only when expired."""
        now = time.monotonic()
        if self._app_token and now < self._app_token_expires_at:
            return self._app_token

        async with self._app_token_lock:
            # Double-check after acquiring lock
            now = time.monotonic()
            if self._app_token and now < self._app_token_expires_at:
                return self._app_token

            try:
                response = await self._http.post(
                    f"{OAUTH_BASE}/token",
                    data={
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "grant_type": "client_credentials",
                    },
                )
            except httpx.HTTPError as e:
                raise TwitchAPIError(f"App token request failed: {e}") from e

            if response.status_code != 200:
                raise TwitchAPIError(
                    f"Failed to get app token: HTTP {response.status_code}",
                    status_code=response.status_code,
                )

            try:
                data = response.json()
            except ValueError as e:
                raise TwitchAPIError("Token response was not valid JSON") from e

            token = data.get("access_token") if isinstance(data, dict) else None
            if not token:
                raise TwitchAPIError("No access_token in token response")

            # Twitch returns expires_in in seconds; refresh 5 min early
            expires_in = data.get("expires_in", 0)
            self._app_token = token
            self._app_token_expires_at = now + max(expires_in - 300, 0)
            logger.debug(f"Obtained app access token (expires in {expires_in}s)")
            return cast(str, token)

    async def _helix_get(self, path: str, params: Any = None) -> dict[str, Any]:
        """GET a Helix endpoint and return the decoded body.

        A 401 drops the cached token and retries once with a fresh one.
        """
        for attempt in (1, 2):
            token = await self._ensure_app_token()
            try:
                response = await self._http.get(
                    f"{HELIX_BASE}/{path}",
                    params=params,
                    headers=self._app_headers(token),
                )
            except httpx.HTTPError as e:
                raise TwitchAPIError(f"Helix GET /{path} failed: {e}") from e

            if response.status_code == 401 and attempt == 1:
                logger.info("App token rejected by Helix, refreshing")
                self.invalidate_app_token()
                continue

            if response.status_code != 200:
                raise TwitchAPIError(
                    f"Helix GET /{path} returned HTTP {response.status_code}",
                    status_code=response.status_code,
                )

            try:
                body = response.json()
            except ValueError as e:
                raise TwitchAPIError(f"Helix GET /{path} returned invalid JSON") from e
            if not isinstance(body, dict):
                raise TwitchAPIError(f"Helix GET /{path} returned an unexpected body")
            return body

        raise TwitchAPIError(f"Helix GET /{path} unauthorized", status_code=401)

    # ------------------------------------------------------------------
    # Games
    # ------------------------------------------------------------------

    async def get_game_by_name(self, name: str) -> dict[str, Any] | None:
        """Look up a single category by its exact name."""
        body = await self._helix_get("games", {"name": name})
        games = body.get("data") or []
        if not games:
            return None
        return cast(dict[str, Any], games[0])

    # ------------------------------------------------------------------
    # Streams
    # ------------------------------------------------------------------

    async def get_streams_by_game(self, game_id: str) -> list[dict[str, Any]]:
        """Get every live stream in a category, following pagination."""
        streams: list[dict[str, Any]] = []
        cursor: str | None = None

        while True:
            params: dict[str, Any] = {"game_id": game_id, "first": STREAMS_PAGE_SIZE}
            if cursor:
                params["after"] = cursor

            body = await self._helix_get("streams", params)
            page = body.get("data") or []
            streams.extend(page)

            cursor = (body.get("pagination") or {}).get("cursor")
            # Helix can hand back a cursor with an empty final page
            if not cursor or not page:
                break

        return streams
