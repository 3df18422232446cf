"""Discord notification formatting and delivery."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone

import discord

from ..core.errors import ChannelUnavailable, DispatchError
from .models import StreamRecord

logger = logging.getLogger(__name__)

TWITCH_PURPLE = 0x6441A4
THUMBNAIL_WIDTH = 320
THUMBNAIL_HEIGHT = 180
FOOTER_TEXT = "Twitch Stream Notification"


@dataclass
class DispatchReport:
    """Per-tick delivery summary"""

    sent: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class NotificationDispatcher:
    """Sends one embed per newly seen streamer. Never retries."""

    def __init__(
        self, game_name: str, channel: discord.abc.Messageable | None = None
    ) -> None:
        self.game_name = game_name
        self.channel = channel

    def build_embed(self, record: StreamRecord) -> discord.Embed:
        name = record.user_display_name
        embed = discord.Embed(
            title=f"{name} is now streaming {self.game_name}",
            url=record.stream_url,
            description=f"🎮 New stream alert for {self.game_name}!",
            color=discord.Colour(TWITCH_PURPLE),
            timestamp=record.started_at or datetime.now(timezone.utc),
        )
        embed.add_field(name="Streamer", value=name, inline=True)
        embed.add_field(name="Viewers", value=str(record.viewer_count), inline=True)
        if record.title:
            # Embed field values are capped at 1024 characters
            embed.add_field(name="Title", value=record.title[:1024], inline=False)
        if record.thumbnail_url:
            embed.set_thumbnail(url=record.thumbnail(THUMBNAIL_WIDTH, THUMBNAIL_HEIGHT))
        embed.set_footer(text=FOOTER_TEXT)
        return embed

    async def dispatch(self, record: StreamRecord) -> None:
        """Send a notification for *record*.

        Raises ChannelUnavailable or DispatchError.
        """
        if self.channel is None:
            raise ChannelUnavailable("Discord notification channel is not resolved")

        name = record.user_display_name
        try:
            await self.channel.send(embed=self.build_embed(record))
        except discord.HTTPException as e:
            raise DispatchError(name, f"{type(e).__name__}: {e}") from e

        logger.info(f"Sent Discord notification: {name} is streaming {self.game_name}")

    async def dispatch_all(self, records: Iterable[StreamRecord]) -> DispatchReport:
        """Attempt every record in order; one failure does not stop the rest."""
        report = DispatchReport()
        records = list(records)
        if not records:
            return report

        if self.channel is None:
            logger.error(
                f"Notification channel unavailable, skipping {len(records)} notification(s)"
            )
            report.failed.extend(r.user_display_name for r in records)
            return report

        for record in records:
            try:
                await self.dispatch(record)
            except (ChannelUnavailable, DispatchError) as e:
                logger.error(str(e))
                report.failed.append(record.user_display_name)
            else:
                report.sent.append(record.user_display_name)
        return report
