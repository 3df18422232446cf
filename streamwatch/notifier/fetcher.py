"""Snapshot of live streams for the watched category."""

import logging

import httpx

from ..core.errors import FetchError, TwitchAPIError
from ..services.twitch_api import TwitchAPIClient
from .models import Category, StreamRecord

logger = logging.getLogger(__name__)


class StreamSnapshotFetcher:
    def __init__(self, client: TwitchAPIClient) -> None:
        self.client = client

    async def fetch(self, category: Category | None) -> list[StreamRecord]:
        """Return every live stream in *category*, or raise FetchError.

        Never returns a partial snapshot.
        """
        if category is None:
            raise ValueError("category must be resolved before fetching streams")

        try:
            raw_streams = await self.client.get_streams_by_game(category.id)
        except (TwitchAPIError, httpx.HTTPError) as e:
            raise FetchError(f"Could not list streams for {category.name}: {e}") from e

        try:
            streams = [StreamRecord.from_helix(raw) for raw in raw_streams]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise FetchError(f"Malformed stream payload: {e!r}") from e

        logger.info(f"{len(streams)} streamers live in {category.name}")
        return streams
