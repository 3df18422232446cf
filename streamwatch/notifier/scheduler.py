"""Tick loop: wait for Discord, resolve once, then check streams forever."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Protocol

import discord

from ..core.config import DEFAULT_CHECK_INTERVAL
from ..core.errors import FetchError
from .dispatcher import DispatchReport, NotificationDispatcher
from .fetcher import StreamSnapshotFetcher
from .models import Category
from .presence import PresenceTracker
from .resolver import CategoryResolver

logger = logging.getLogger(__name__)


class ChatClient(Protocol):
    """The parts of discord.Client the scheduler relies on"""

    async def wait_until_ready(self) -> None: ...

    def get_channel(self, id: int, /) -> Any: ...

    async def fetch_channel(self, channel_id: int, /) -> Any: ...


class SchedulerState(str, Enum):
    STARTING = "starting"
    READY = "ready"
    TICKING = "ticking"
    STOPPED = "stopped"
    FAILED = "failed"

    @property
    def is_running(self) -> bool:
        return self is SchedulerState.TICKING


class Scheduler:
    """Drives fetch -> reconcile -> dispatch on a fixed interval.

    Ticks run one at a time. When a tick overruns the interval the missed
    slots are skipped, not queued, and the next tick starts on the next
    future slot.
    """

    def __init__(
        self,
        chat_client: ChatClient,
        resolver: CategoryResolver,
        fetcher: StreamSnapshotFetcher,
        tracker: PresenceTracker,
        dispatcher: NotificationDispatcher,
        *,
        game_name: str,
        channel_id: int,
        interval: float = DEFAULT_CHECK_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")

        self.chat_client = chat_client
        self.resolver = resolver
        self.fetcher = fetcher
        self.tracker = tracker
        self.dispatcher = dispatcher
        self.game_name = game_name
        self.channel_id = channel_id
        self.interval = interval
        self._clock = clock
        self._sleep = sleep

        self.state = SchedulerState.STARTING
        self.category: Category | None = None
        self.tick_count = 0
        self.last_tick_at: datetime | None = None

    async def run(self) -> None:
        """Start up, then tick until cancelled.

        CategoryNotFound propagates; the caller treats it as fatal.
        """
        try:
            await self.start()
            await self._tick_forever()
        except asyncio.CancelledError:
            self.state = SchedulerState.STOPPED
            raise

    async def start(self) -> None:
        """Readiness handshake: wait for Discord, resolve channel and category."""
        self.state = SchedulerState.STARTING
        logger.info("Waiting for Discord client to become ready")
        await self.chat_client.wait_until_ready()
        self.state = SchedulerState.READY

        await self.resolve_channel()

        try:
            self.category = await self.resolver.resolve(self.game_name)
        except Exception:
            self.state = SchedulerState.FAILED
            raise

    async def resolve_channel(self) -> bool:
        """Look up the notification channel and hand it to the dispatcher."""
        channel = self.chat_client.get_channel(self.channel_id)
        if channel is None:
            try:
                channel = await self.chat_client.fetch_channel(self.channel_id)
            except (discord.HTTPException, discord.InvalidData) as e:
                logger.error(f"Cannot resolve Discord channel {self.channel_id}: {e}")
                return False
            except Exception as e:
                # Transport failures leave the notifier degraded, never stopped
                logger.exception(f"Error fetching Discord channel {self.channel_id}: {e}")
                return False

        if not hasattr(channel, "send"):
            logger.error(f"Discord channel {self.channel_id} cannot receive messages")
            return False

        self.dispatcher.channel = channel
        logger.info(f"Notifications will be sent to #{getattr(channel, 'name', self.channel_id)}")
        return True

    async def _tick_forever(self) -> None:
        self.state = SchedulerState.TICKING
        next_at = self._clock()

        while True:
            try:
                await self.tick()
            except Exception as e:
                logger.exception(f"Unexpected error during stream check: {e}")

            next_at += self.interval
            now = self._clock()
            if now > next_at:
                skipped = int((now - next_at) // self.interval) + 1
                next_at += skipped * self.interval
                logger.warning(f"Stream check overran its interval, skipped {skipped} tick(s)")

            await self._sleep(next_at - now)

    async def tick(self) -> DispatchReport | None:
        """One fetch -> reconcile -> dispatch cycle.

        Returns None when the tick was abandoned.
        """
        if self.category is None:
            logger.warning("Category not resolved yet, skipping stream check")
            return None

        if self.dispatcher.channel is None:
            await self.resolve_channel()

        try:
            streams = await self.fetcher.fetch(self.category)
        except FetchError as e:
            logger.error(f"Error checking streams: {e}")
            return None

        result = self.tracker.reconcile(streams)
        # Marked before sending: a failed send is not retried on later ticks
        self.tracker.apply(result)
        report = await self.dispatcher.dispatch_all(result.new)

        self.tick_count += 1
        self.last_tick_at = datetime.now(timezone.utc)
        if report.failed:
            logger.warning(f"{len(report.failed)} notification(s) failed this tick")
        return report
