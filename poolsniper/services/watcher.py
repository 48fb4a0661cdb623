"""Pool-creation watcher: one subscription, admission control, reconnects."""
from __future__ import annotations

import asyncio
import logging
from enum import Enum

from ..config import LiquidityPoolConfig
from ..interfaces.event_source import EventSource
from ..models import PoolEvent
from .gate import ConcurrencyGate, Permit
from .pipeline import PoolPipeline

logger = logging.getLogger(__name__)


class WatcherState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    SUBSCRIBED = "subscribed"


class EventWatcher:
    """Subscribe to pool program logs and spawn a pipeline run per new pool."""

    def __init__(
        self,
        source: EventSource,
        gate: ConcurrencyGate,
        pipeline: PoolPipeline,
        pool_config: LiquidityPoolConfig,
        reconnect_delay: float = 5.0,
        sleep=asyncio.sleep,
    ) -> None:
        self._source = source
        self._gate = gate
        self._pipeline = pipeline
        self._pool = pool_config
        self._reconnect_delay = reconnect_delay
        self._sleep = sleep
        self._tasks: set[asyncio.Task] = set()
        self.state = WatcherState.DISCONNECTED
        self.dropped = 0

    def is_pool_creation(self, event: PoolEvent) -> bool:
        return any(self._pool.init_marker in line for line in event.log_lines)

    def dispatch(self, event: PoolEvent) -> asyncio.Task | None:
        """Admit ``event`` into a pipeline task, or drop it when the gate is full."""
        if not self.is_pool_creation(event):
            return None

        permit = self._gate.try_acquire()
        if permit is None:
            self.dropped += 1
            logger.info(
                "Max concurrent transactions (%d) reached, skipping %s",
                self._gate.limit, event.signature,
            )
            return None

        task = asyncio.create_task(self._run(permit, event.signature))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, permit: Permit, signature: str) -> None:
        with permit:
            await self._pipeline.process(signature)

    def _mark_subscribed(self) -> None:
        self.state = WatcherState.SUBSCRIBED

    async def run_once(self) -> None:
        """Hold one subscription until it closes or fails."""
        self.state = WatcherState.CONNECTING
        logger.info("Connecting to pool program %s", self._pool.program_id)
        try:
            async for event in self._source.subscribe(
                self._pool.program_id, on_subscribed=self._mark_subscribed
            ):
                self.dispatch(event)
        finally:
            self.state = WatcherState.DISCONNECTED

    async def run_forever(self) -> None:
        while True:
            try:
                await self.run_once()
                logger.warning("WebSocket closed")
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error("WebSocket error: %s", e)
            logger.info("Reconnecting in %s seconds...", self._reconnect_delay)
            await self._sleep(self._reconnect_delay)
