"""Category name to Twitch category id lookup."""

import logging

from ..core.errors import CategoryNotFound, TwitchAPIError
from ..services.twitch_api import TwitchAPIClient
from .models import Category

logger = logging.getLogger(__name__)


class CategoryResolver:
    """Resolves the watched game once at startup."""

    def __init__(self, client: TwitchAPIClient) -> None:
        self.client = client

    async def resolve(self, name: str) -> Category:
        """Return the category for *name*.

        Raises CategoryNotFound when Twitch has no such game or the
        lookup itself fails; either way nothing can be polled.
        """
        try:
            game = await self.client.get_game_by_name(name)
        except TwitchAPIError as e:
            logger.error(f"Category lookup for {name!r} failed: {e}")
            raise CategoryNotFound(name) from e

        if not game or not game.get("id"):
            raise CategoryNotFound(name)

        category = Category(name=game.get("name") or name, id=str(game["id"]))
        logger.info(f"Resolved category {category.name} (ID: {category.id})")
        return category
