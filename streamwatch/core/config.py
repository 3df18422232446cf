"""Notifier configuration"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigMissing

logger = logging.getLogger(__name__)

# === Path Configuration ===
PACKAGE_DIR = Path(__file__).parent.parent
PROJECT_DIR = PACKAGE_DIR.parent

DEFAULT_CHECK_INTERVAL = 5 * 60


class NotifierSettings(BaseSettings):
    """Settings read from the environment or a .env file"""

    model_config = SettingsConfigDict(
        env_file=PROJECT_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Twitch app credentials (client-credentials flow)
    twitch_client_id: str = Field(..., min_length=1, description="Twitch OAuth Client ID")
    twitch_client_secret: str = Field(
        ..., min_length=1, description="Twitch OAuth Client Secret"
    )

    # Discord
    discord_bot_token: str = Field(..., min_length=1, description="Discord bot token")
    discord_twitch_channel: int = Field(
        ..., gt=0, description="ID of the Discord channel that receives alerts"
    )

    # What to watch
    game_name: str = Field(..., min_length=1, description="Twitch category to watch")
    check_interval_seconds: float = Field(
        default=DEFAULT_CHECK_INTERVAL, gt=0, description="Seconds between stream checks"
    )

    # Health server
    health_server_enabled: bool = Field(default=False, description="Serve /health and /status")
    health_port: int = Field(default=8080, description="Health server port")

    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("game_name")
    @classmethod
    def strip_game_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("GAME_NAME must not be blank")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            logger.warning(f"Invalid log level '{v}', defaulting to INFO")
            return "INFO"
        return v_upper


def load_settings(**overrides) -> NotifierSettings:
    """Build settings, turning validation failures into ConfigMissing.

    Keyword overrides take precedence over the environment.
    """
    try:
        return NotifierSettings(**overrides)
    except ValidationError as e:
        fields = [
            str(err["loc"][0]).upper() if err["loc"] else "?" for err in e.errors()
        ]
        raise ConfigMissing(fields, detail=f"{e.error_count()} error(s)") from e


@lru_cache
def get_settings() -> NotifierSettings:
    """Get cached settings instance"""
    return load_settings()
