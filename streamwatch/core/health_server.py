"""HTTP health check server"""

import logging
import time
from typing import TYPE_CHECKING, Any

from aiohttp import web

if TYPE_CHECKING:
    from ..notifier.scheduler import Scheduler

logger = logging.getLogger(__name__)


class HealthCheckServer:
    """Liveness and status endpoints for container platforms"""

    def __init__(
        self,
        scheduler: "Scheduler",
        bot: Any = None,
        host: str = "0.0.0.0",
        port: int = 8080,
    ) -> None:
        self.scheduler = scheduler
        self.bot = bot
        self.host = host
        self.port = port
        self.app = web.Application()
        self.runner: web.AppRunner | None = None
        self._start_time: float = time.time()
        self._setup_routes()

    def _setup_routes(self) -> None:
        self.app.router.add_get("/", self.handle_root)
        self.app.router.add_get("/health", self.handle_health)
        self.app.router.add_get("/status", self.handle_status)
        self.app.router.add_get("/ping", self.handle_ping)

    async def handle_root(self, request: web.Request) -> web.Response:
        return web.json_response({"service": "streamwatch", "status": "running"})

    async def handle_health(self, request: web.Request) -> web.Response:
        """Always 200 (liveness); body says whether ticking has begun"""
        ticking = self.scheduler.state.is_running
        return web.json_response(
            {"status": "healthy" if ticking else "starting", "ready": ticking}
        )

    async def handle_status(self, request: web.Request) -> web.Response:
        scheduler = self.scheduler
        category = scheduler.category
        last_tick = scheduler.last_tick_at
        bot_ready = self.bot is not None and self.bot.is_ready()
        return web.json_response(
            {
                "service": "streamwatch",
                "state": scheduler.state.value,
                "discord_ready": bot_ready,
                "category": {"name": category.name, "id": category.id} if category else None,
                "channel_resolved": scheduler.dispatcher.channel is not None,
                "tick_count": scheduler.tick_count,
                "last_tick_at": last_tick.isoformat() if last_tick else None,
                "notified_streamers": sorted(scheduler.tracker.notified),
                "uptime_seconds": int(time.time() - self._start_time),
            }
        )

    async def handle_ping(self, request: web.Request) -> web.Response:
        return web.Response(text="pong")

    async def start(self) -> None:
        try:
            self.runner = web.AppRunner(self.app)
            await self.runner.setup()
            site = web.TCPSite(self.runner, self.host, self.port)
            await site.start()
            logger.info(f"Health server started on {self.host}:{self.port}")
        except Exception as e:
            logger.exception(f"Failed to start health server: {e}")
            raise

    async def stop(self) -> None:
        if self.runner:
            try:
                await self.runner.cleanup()
                logger.info("Health server stopped")
            except Exception as e:
                logger.exception(f"Error stopping health server: {e}")
            self.runner = None
