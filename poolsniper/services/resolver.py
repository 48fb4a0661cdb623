"""Signature → mint pair resolution with bounded exponential backoff."""
from __future__ import annotations

import asyncio
import logging

from ..config import LiquidityPoolConfig, TxConfig
from ..errors import ProviderError, ResolutionError
from ..interfaces.providers import TransactionDetailProvider
from ..models import MintPair
from ..providers.helius.parser import extract_mint_pair

logger = logging.getLogger(__name__)


def compute_backoff(attempt: int, base: float, factor: float, cap: float) -> float:
    """Delay in seconds after failed attempt ``attempt`` (1-based)."""
    return min(base * factor**attempt, cap)


class TransactionResolver:
    """Turn a pool-creation signature into its base/quote mints."""

    def __init__(
        self,
        provider: TransactionDetailProvider,
        tx_config: TxConfig,
        pool_config: LiquidityPoolConfig,
        sleep=asyncio.sleep,
    ) -> None:
        self._provider = provider
        self._tx = tx_config
        self._pool = pool_config
        self._sleep = sleep

    def backoff_schedule(self) -> list[float]:
        """Delays slept between attempts; one fewer than ``max_retries``."""
        return [
            compute_backoff(n, self._tx.backoff_base, self._tx.backoff_factor, self._tx.backoff_cap)
            for n in range(1, self._tx.max_retries)
        ]

    async def resolve(self, signature: str) -> MintPair | None:
        """Return the mint pair, or None once every attempt has failed."""
        await self._sleep(self._tx.initial_delay)

        max_retries = self._tx.max_retries
        for attempt in range(1, max_retries + 1):
            try:
                transactions = await self._provider.fetch_transactions([signature])
                pair = extract_mint_pair(
                    transactions, self._pool.program_id, self._pool.quote_mint
                )
                logger.debug("Resolved %s on attempt %d", signature, attempt)
                return pair
            except (ProviderError, ResolutionError) as e:
                logger.warning(
                    "Attempt %d/%d to resolve %s failed: %s",
                    attempt, max_retries, signature, e,
                )

            if attempt < max_retries:
                delay = compute_backoff(
                    attempt, self._tx.backoff_base, self._tx.backoff_factor, self._tx.backoff_cap
                )
                logger.info("Waiting %.1f seconds before next attempt...", delay)
                await self._sleep(delay)

        logger.error("All attempts to resolve %s failed", signature)
        return None
