"""Core modules: configuration, logging, errors and the health server."""

from .config import DEFAULT_CHECK_INTERVAL, NotifierSettings, get_settings, load_settings
from .errors import (
    CategoryNotFound,
    ChannelUnavailable,
    ConfigMissing,
    DispatchError,
    FetchError,
    StreamWatchError,
    TwitchAPIError,
)
from .health_server import HealthCheckServer
from .logging import setup_logging

__all__ = [
    # Settings
    "NotifierSettings",
    "DEFAULT_CHECK_INTERVAL",
    "get_settings",
    "load_settings",
    # Errors
    "StreamWatchError",
    "ConfigMissing",
    "CategoryNotFound",
    "FetchError",
    "ChannelUnavailable",
    "DispatchError",
    "TwitchAPIError",
    # Services
    "HealthCheckServer",
    # Logging
    "setup_logging",
]
