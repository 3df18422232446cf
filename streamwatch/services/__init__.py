"""External platform clients."""

from .twitch_api import HELIX_BASE, OAUTH_BASE, TwitchAPIClient

__all__ = ["TwitchAPIClient", "HELIX_BASE", "OAUTH_BASE"]
