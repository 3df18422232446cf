"""Shared pytest fixtures and fakes for streamwatch tests.

Fixture summary
---------------
twitch        — In-memory stand-in for TwitchAPIClient (games + queued snapshots).
channel       — Discord text channel double that records sent embeds.
chat_client   — Discord client double with a controllable readiness event.
scheduler     — Scheduler wired to the fakes above, readiness already set.

No network access or Discord login is needed.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from types import SimpleNamespace
from typing import Any

import discord
import pytest

from streamwatch.core.errors import TwitchAPIError
from streamwatch.notifier import (
    CategoryResolver,
    NotificationDispatcher,
    PresenceTracker,
    Scheduler,
    StreamSnapshotFetcher,
)

GAME_NAME = "Hollow Knight"
GAME_ID = "490147"
CHANNEL_ID = 123456789


def helix_stream(
    name: str,
    viewers: int = 10,
    *,
    login: str | None = None,
    title: str = "",
) -> dict[str, Any]:
    """Build a Helix /streams entry."""
    login = login or name.lower()
    return {
        "id": f"stream-{login}",
        "user_id": f"user-{login}",
        "user_login": login,
        "user_name": name,
        "game_id": GAME_ID,
        "game_name": GAME_NAME,
        "type": "live",
        "title": title,
        "viewer_count": viewers,
        "started_at": "2024-05-01T18:00:00Z",
        "language": "en",
        "thumbnail_url": (
            f"https://static-cdn.jtvnw.net/previews-ttv/live_user_{login}-{{width}}x{{height}}.jpg"
        ),
    }


def http_error(cls: type[discord.HTTPException] = discord.HTTPException, status: int = 500):
    response = SimpleNamespace(status=status, reason="Error")
    return cls(response, "request failed")


class FakeTwitch:
    """Duck-typed TwitchAPIClient with scripted snapshots.

    Each entry in *snapshots* is either a list of Helix stream dicts or an
    exception to raise for that call.
    """

    def __init__(self, games: dict[str, str] | None = None, snapshots: Iterable[Any] = ()):
        self.games = {GAME_NAME: GAME_ID} if games is None else games
        self.snapshots = list(snapshots)
        self.game_calls: list[str] = []
        self.stream_calls: list[str] = []

    def queue(self, *snapshots: Any) -> None:
        self.snapshots.extend(snapshots)

    async def get_game_by_name(self, name: str) -> dict[str, Any] | None:
        self.game_calls.append(name)
        game_id = self.games.get(name)
        if game_id is None:
            return None
        return {"id": game_id, "name": name, "box_art_url": ""}

    async def get_streams_by_game(self, game_id: str) -> list[dict[str, Any]]:
        self.stream_calls.append(game_id)
        if not self.snapshots:
            return []
        snapshot = self.snapshots.pop(0)
        if isinstance(snapshot, Exception):
            raise snapshot
        return list(snapshot)


class FakeChannel:
    """Records embeds; raises for streamers listed in *fail_for*."""

    def __init__(self, name: str = "stream-alerts", fail_for: Iterable[str] = ()):
        self.id = CHANNEL_ID
        self.name = name
        self.fail_for = set(fail_for)
        self.sent: list[discord.Embed] = []

    @property
    def sent_streamers(self) -> list[str]:
        return [embed.fields[0].value for embed in self.sent]

    async def send(self, *, embed: discord.Embed) -> None:
        streamer = embed.fields[0].value
        if streamer in self.fail_for:
            raise http_error(discord.Forbidden, 403)
        self.sent.append(embed)


class FakeChatClient:
    def __init__(
        self, channels: dict[int, Any] | None = None, fetch_error: BaseException | None = None
    ):
        self.channels = channels or {}
        self.fetch_error = fetch_error
        self.ready = asyncio.Event()
        self.fetch_calls = 0

    async def wait_until_ready(self) -> None:
        await self.ready.wait()

    def get_channel(self, id: int) -> Any:
        return self.channels.get(id)

    async def fetch_channel(self, channel_id: int) -> Any:
        self.fetch_calls += 1
        raise self.fetch_error or http_error(discord.NotFound, 404)


def build_scheduler(
    twitch: FakeTwitch, chat_client: FakeChatClient, **kwargs: Any
) -> Scheduler:
    return Scheduler(
        chat_client,
        CategoryResolver(twitch),  # type: ignore[arg-type]
        StreamSnapshotFetcher(twitch),  # type: ignore[arg-type]
        PresenceTracker(),
        NotificationDispatcher(GAME_NAME),
        game_name=kwargs.pop("game_name", GAME_NAME),
        channel_id=CHANNEL_ID,
        **kwargs,
    )


@pytest.fixture
def twitch() -> FakeTwitch:
    return FakeTwitch()


@pytest.fixture
def channel() -> FakeChannel:
    return FakeChannel()


@pytest.fixture
def chat_client(channel: FakeChannel) -> FakeChatClient:
    client = FakeChatClient({CHANNEL_ID: channel})
    client.ready.set()
    return client


@pytest.fixture
def scheduler(twitch: FakeTwitch, chat_client: FakeChatClient) -> Scheduler:
    return build_scheduler(twitch, chat_client)


@pytest.fixture
def api_error() -> TwitchAPIError:
    return TwitchAPIError("Helix GET /streams returned HTTP 503", status_code=503)
