"""One pool-creation event, end to end."""
from __future__ import annotations

import logging

from ..config import LiquidityPoolConfig, SwapConfig
from ..models import SwapResult
from ..notifications import NotificationHub
from ..notifications.hub import build_passed_message, token_links
from .resolver import TransactionResolver
from .risk_engine import RiskEngine
from .swap_executor import SwapExecutor

logger = logging.getLogger(__name__)

PUMP_FUN_SUFFIX = "pump"


class PoolPipeline:
    """resolve → risk check → notify → buy."""

    def __init__(
        self,
        resolver: TransactionResolver,
        risk_engine: RiskEngine,
        executor: SwapExecutor,
        pool_config: LiquidityPoolConfig,
        swap_config: SwapConfig,
        notifications: NotificationHub | None = None,
    ) -> None:
        self._resolver = resolver
        self._risk = risk_engine
        self._executor = executor
        self._pool = pool_config
        self._swap = swap_config
        self._notify = notifications or NotificationHub()

    async def process(self, signature: str) -> SwapResult | None:
        """Run the pipeline for one signature. Never raises."""
        try:
            return await self._process(signature)
        except Exception:
            logger.exception("Pipeline run for %s crashed", signature)
            return None

    async def _process(self, signature: str) -> SwapResult | None:
        logger.info("New pool detected: %s", signature)

        pair = await self._resolver.resolve(signature)
        if pair is None:
            logger.warning("No valid mints found for %s, aborting", signature)
            return None

        if self._pool.ignore_pump_fun and pair.base_mint.endswith(PUMP_FUN_SUFFIX):
            logger.info("Skipping pump.fun token %s", pair.base_mint)
            return None

        verdict = await self._risk.evaluate(pair.base_mint)
        if not verdict.passed:
            logger.info(
                "Token %s rejected by %s %s",
                pair.base_mint, verdict.first_failed_rule, verdict.detail,
            )
            return None

        logger.info("Token %s passed risk checks\n%s", pair.base_mint, token_links(pair.base_mint))
        await self._notify.send_log(
            build_passed_message(pair.base_mint, verdict.report), silent=False
        )

        if self._swap.simulation_mode:
            logger.info("Simulation mode: not buying %s", pair.base_mint)
            return None

        return await self._executor.buy(pair.quote_mint, pair.base_mint)
