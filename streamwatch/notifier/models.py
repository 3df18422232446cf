"""Value types shared by the notifier components."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

TWITCH_URL = "https://twitch.tv"


@dataclass(frozen=True)
class Category:
    """A resolved Twitch category (game)."""

    name: str
    id: str


@dataclass(frozen=True)
class StreamRecord:
    """One live stream as reported by a single snapshot."""

    user_display_name: str
    user_login: str
    viewer_count: int
    thumbnail_url: str
    title: str = ""
    game_name: str = ""
    language: str = ""
    started_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.user_display_name:
            raise ValueError("user_display_name must not be empty")
        if self.viewer_count < 0:
            raise ValueError("viewer_count must be >= 0")

    @property
    def stream_url(self) -> str:
        return f"{TWITCH_URL}/{self.user_login or self.user_display_name}"

    def thumbnail(self, width: int, height: int) -> str:
        """Fill the {width}/{height} placeholders of the thumbnail template."""
        return self.thumbnail_url.replace("{width}", str(width)).replace(
            "{height}", str(height)
        )

    @classmethod
    def from_helix(cls, data: dict[str, Any]) -> StreamRecord:
        """Build from a Helix /streams entry. Raises KeyError/ValueError on bad data."""
        started_at = None
        if raw_started := data.get("started_at"):
            started_at = datetime.fromisoformat(raw_started.replace("Z", "+00:00"))

        return cls(
            user_display_name=data["user_name"],
            user_login=data.get("user_login") or "",
            viewer_count=int(data.get("viewer_count", 0)),
            thumbnail_url=data.get("thumbnail_url") or "",
            title=data.get("title") or "",
            game_name=data.get("game_name") or "",
            language=data.get("language") or "",
            started_at=started_at,
        )
