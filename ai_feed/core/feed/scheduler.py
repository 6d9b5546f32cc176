"""
Timer-driven feed push.
"""

import asyncio
import logging
from typing import Callable, Optional

from ai_feed.core.woo_client import WooClient
from .delivery import DEFAULT_PUSH_TIMEOUT, build_and_push, can_push
from .models import FeedSettings


logger = logging.getLogger(__name__)


class PushScheduler:
    """
    Runs a feed push every `interval` seconds in a background asyncio task.

    Settings are reloaded on every tick. A failed push is only retried on
    the next tick.
    """

    def __init__(
        self,
        settings_loader: Callable[[], FeedSettings],
        client_factory: Callable[[], Optional[WooClient]],
        interval: float = 900.0,
        timeout: float = DEFAULT_PUSH_TIMEOUT
    ):
        self.settings_loader = settings_loader
        self.client_factory = client_factory
        self.interval = interval
        self.timeout = timeout
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop())
        logger.info(f"Feed push scheduler started (every {self.interval:.0f}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Feed push scheduler stopped")

    async def run_once(self) -> bool:
        """One tick: push if delivery is enabled. Never raises."""
        try:
            settings = self.settings_loader()
        except ValueError as e:
            logger.error(f"Cannot load feed settings for push: {e}")
            return False

        if not can_push(settings):
            logger.debug("Feed delivery disabled, nothing to push")
            return False

        client = self.client_factory()
        if client is None:
            logger.warning("Store connection not configured, skipping feed push")
            return False

        try:
            return await build_and_push(client, settings, timeout=self.timeout)
        finally:
            await client.close()

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.run_once()
            except Exception as e:
                logger.error(f"Feed push tick failed: {e}", exc_info=True)
