"""
Background worker purging expired chat messages.

MongoDB's TTL monitor already removes messages through the TTL index on
``created_at``; this sweep bounds storage on deployments where the monitor
is not available (or lags) and runs every ``message_sweep_interval_seconds``.
"""

import asyncio
from typing import Optional

import structlog

from ..core.telemetry import increment_expired_purged
from ..services.message_store import MessageStore

logger = structlog.get_logger(__name__)

ERROR_RETRY_SECONDS = 60


class MessageExpiryWorker:
    """Periodic sweep over the message store."""

    def __init__(self, store: MessageStore, interval_seconds: int = 300):
        self.store = store
        self.interval_seconds = interval_seconds
        self.running = False
        self._task: Optional[asyncio.Task] = None

    async def start(self) -> None:
        if self.running:
            logger.warning("Message expiry worker already running")
            return

        self.running = True
        self._task = asyncio.create_task(self._sweep_loop(), name="message_expiry_sweep")
        logger.info("Message expiry worker started", interval_seconds=self.interval_seconds)

    async def stop(self) -> None:
        if not self.running:
            return

        self.running = False
        if self._task is not None:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None
        logger.info("Message expiry worker stopped")

    async def run_once(self) -> int:
        """Run a single sweep. Returns the number of purged messages."""
        deleted = await self.store.purge_expired()
        increment_expired_purged(deleted)
        return deleted

    async def _sweep_loop(self) -> None:
        while self.running:
            try:
                await asyncio.sleep(self.interval_seconds)
                deleted = await self.run_once()
                logger.debug("Message expiry sweep completed", deleted_count=deleted)
            except asyncio.CancelledError:
                logger.info("Message expiry loop cancelled")
                break
            except Exception as e:
                logger.error("Message expiry sweep failed", error=str(e), exc_info=True)
                await asyncio.sleep(ERROR_RETRY_SECONDS)
