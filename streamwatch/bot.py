"""
streamwatch Discord client and entry point.

Logs into Discord, then runs the stream check scheduler as a background
task owned by the client.
"""

import asyncio
import logging
import sys

import discord
from discord.ext import commands

from .core.config import NotifierSettings, get_settings
from .core.errors import ConfigMissing
from .core.health_server import HealthCheckServer
from .core.logging import setup_logging
from .notifier import (
    CategoryResolver,
    NotificationDispatcher,
    PresenceTracker,
    Scheduler,
    StreamSnapshotFetcher,
)
from .services.twitch_api import TwitchAPIClient

logger = logging.getLogger("streamwatch")


class StreamWatchBot(commands.Bot):
    """Discord bot that announces new streams of one game"""

    def __init__(self, settings: NotifierSettings, twitch: TwitchAPIClient):
        # Only channel lookups are needed
        intents = discord.Intents.none()
        intents.guilds = True
        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            help_command=None,
        )

        self.settings = settings
        self.scheduler = Scheduler(
            self,
            CategoryResolver(twitch),
            StreamSnapshotFetcher(twitch),
            PresenceTracker(),
            NotificationDispatcher(settings.game_name),
            game_name=settings.game_name,
            channel_id=settings.discord_twitch_channel,
            interval=settings.check_interval_seconds,
        )
        self.health_server: HealthCheckServer | None = None
        if settings.health_server_enabled:
            self.health_server = HealthCheckServer(
                self.scheduler, bot=self, port=settings.health_port
            )

        self.fatal_error: BaseException | None = None
        self._scheduler_task: asyncio.Task | None = None
        self._close_task: asyncio.Task | None = None

    async def setup_hook(self) -> None:
        """Start background services before the gateway connects"""
        if self.health_server:
            await self.health_server.start()

        self._scheduler_task = asyncio.create_task(
            self.scheduler.run(), name="streamwatch-scheduler"
        )
        self._scheduler_task.add_done_callback(self._on_scheduler_done)
        logger.info("Connecting to Discord...")

    def _on_scheduler_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return

        self.fatal_error = exc
        logger.error(f"Stream checks stopped: {exc}")
        if not self.is_closed():
            self._close_task = asyncio.create_task(self.close())

    async def on_ready(self) -> None:
        user = self.user
        logger.info(f"Logged in as {user} (ID: {user.id if user else '?'})")
        logger.info(
            f"Watching {self.settings.game_name} every "
            f"{self.settings.check_interval_seconds:g}s | discord.py {discord.__version__}"
        )

    async def close(self) -> None:
        if self._scheduler_task and not self._scheduler_task.done():
            self._scheduler_task.cancel()
        if self.health_server:
            await self.health_server.stop()
        await super().close()


async def main() -> int:
    """Run the notifier until shutdown. Returns the process exit code."""
    try:
        settings = get_settings()
    except ConfigMissing as e:
        setup_logging()
        logger.error(str(e))
        logger.error("Set the missing values in the environment or in .env")
        return 1

    setup_logging(settings.log_level)

    async with TwitchAPIClient(settings.twitch_client_id, settings.twitch_client_secret) as twitch:
        async with StreamWatchBot(settings, twitch) as bot:
            try:
                await bot.start(settings.discord_bot_token)
            except discord.LoginFailure as e:
                logger.error(f"Discord login failed: {e}")
                return 1

    if bot.fatal_error is not None:
        return 1
    return 0


def run() -> None:
    """Console script entry point"""
    try:
        exit_code = asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot stopped manually")
        exit_code = 0
    sys.exit(exit_code)


if __name__ == "__main__":
    run()
