"""Build the object graph from one AppConfig."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from .chains.solana import SolanaClient, SolanaLogsSource
from .config import AppConfig
from .notifications import NotificationHub
from .oracles import DexScreenerOracle, FallbackPriceOracle, JupiterPriceOracle
from .providers import HeliusClient, JupiterClient, RugCheckClient
from .services import (
    ConcurrencyGate,
    EventWatcher,
    ExitMonitor,
    HoldingsLedger,
    PoolPipeline,
    RiskEngine,
    SwapExecutor,
    TransactionResolver,
)
from .services.swap_executor import load_keypair
from .storage import HoldingsStore, SeenTokenStore

logger = logging.getLogger(__name__)


@dataclass
class Application:
    config: AppConfig
    ledger: HoldingsLedger
    executor: SwapExecutor
    watcher: EventWatcher
    exit_monitor: ExitMonitor
    notifications: NotificationHub

    async def run(self) -> None:
        """Watcher and exit monitor side by side until cancelled."""
        await asyncio.gather(
            self.watcher.run_forever(),
            self.exit_monitor.run_continuous(),
        )


def build_application(config: AppConfig) -> Application:
    endpoints = config.endpoints
    notifications = NotificationHub.from_config(
        config.notifications, timeout=endpoints.request_timeout
    )

    holdings_store = HoldingsStore(config.swap.db_path)
    seen_store = SeenTokenStore(config.swap.db_path)
    ledger = HoldingsLedger(holdings_store)

    chain = SolanaClient(endpoints)
    details = HeliusClient(endpoints)
    primary_prices = JupiterPriceOracle(endpoints.price, endpoints.request_timeout)
    prices = FallbackPriceOracle(
        primary_prices,
        DexScreenerOracle(endpoints.secondary_price, endpoints.request_timeout),
    )

    executor = SwapExecutor(
        swap_provider=JupiterClient(endpoints, verbose=config.swap.verbose_log),
        chain=chain,
        ledger=ledger,
        detail_provider=details,
        sol_price_oracle=prices,
        seen_store=seen_store,
        swap_config=config.swap,
        sell_config=config.sell,
        keypair=load_keypair(config.wallet.private_key),
        notifications=notifications,
    )

    pipeline = PoolPipeline(
        resolver=TransactionResolver(details, config.tx, config.liquidity_pool),
        risk_engine=RiskEngine(
            RugCheckClient(endpoints, verbose=config.rug_check.verbose_log),
            seen_store,
            config.rug_check,
        ),
        executor=executor,
        pool_config=config.liquidity_pool,
        swap_config=config.swap,
        notifications=notifications,
    )

    watcher = EventWatcher(
        source=SolanaLogsSource(endpoints.rpc_wss),
        gate=ConcurrencyGate(config.tx.concurrent_transactions),
        pipeline=pipeline,
        pool_config=config.liquidity_pool,
        reconnect_delay=config.tx.reconnect_delay,
    )

    exit_monitor = ExitMonitor(
        ledger=ledger,
        oracle=prices,
        executor=executor,
        sell_config=config.sell,
        quote_mint=config.liquidity_pool.quote_mint,
        notifications=notifications,
    )

    if config.swap.simulation_mode:
        logger.warning("Simulation mode is on: no swaps will be sent")

    return Application(
        config=config,
        ledger=ledger,
        executor=executor,
        watcher=watcher,
        exit_monitor=exit_monitor,
        notifications=notifications,
    )
