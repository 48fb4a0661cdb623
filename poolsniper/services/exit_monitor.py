"""Position tracking with stop-loss / take-profit exits."""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from ..config import SellConfig
from ..interfaces.price_oracle import PriceOracle
from ..models import Holding, PositionSnapshot, SwapStatus
from ..notifications import NotificationHub
from ..notifications.hub import build_sell_message
from .ledger import HoldingsLedger, calc_unrealized_pnl, calc_unrealized_pnl_percent
from .swap_executor import SwapExecutor

logger = logging.getLogger(__name__)

GMGN_WALLET_URL = "https://gmgn.ai/sol/address/"


def snapshot(holding: Holding, price: float) -> PositionSnapshot:
    return PositionSnapshot(
        holding=holding,
        price=price,
        pnl_usd=calc_unrealized_pnl(holding, price),
        pnl_pct=calc_unrealized_pnl_percent(holding, price),
    )


def format_holding_line(snap: PositionSnapshot) -> str:
    """One console line per holding: time, units, name, cost and PnL."""
    holding = snap.holding
    trade_time = datetime.fromtimestamp(holding.entry_time / 1000).strftime("%H:%M:%S")
    icon = "🟢" if snap.pnl_usd > 0 else "🔴"
    return (
        f"{trade_time} Buy {holding.units} {holding.display_name} for "
        f"${holding.sol_spent_usd:.2f}. {icon} Unrealized PnL: "
        f"${snap.pnl_usd:.2f} ({snap.pnl_pct:.2f}%)"
    )


class ExitMonitor:
    """Price every open holding each interval and exit on PnL thresholds."""

    def __init__(
        self,
        ledger: HoldingsLedger,
        oracle: PriceOracle,
        executor: SwapExecutor | None,
        sell_config: SellConfig,
        quote_mint: str,
        notifications: NotificationHub | None = None,
    ) -> None:
        self._ledger = ledger
        self._oracle = oracle
        self._executor = executor
        self._cfg = sell_config
        self._quote_mint = quote_mint
        self._notify = notifications or NotificationHub()
        self._halted: set[str] = set()

    @property
    def halted_mints(self) -> frozenset[str]:
        return frozenset(self._halted)

    def _exit_reason(self, snap: PositionSnapshot) -> str | None:
        if snap.pnl_pct >= self._cfg.take_profit_percent:
            return "take profit"
        if snap.pnl_pct <= -self._cfg.stop_loss_percent:
            return "stop loss"
        return None

    async def snapshots(self) -> tuple[list[PositionSnapshot], list[Holding]]:
        """Price the open holdings. Returns ``(priced, unpriced)``."""
        holdings = self._ledger.list_open()
        if not holdings:
            return [], []

        prices = await self._oracle.fetch_prices([h.mint for h in holdings])
        priced: list[PositionSnapshot] = []
        unpriced: list[Holding] = []
        for holding in holdings:
            price = prices.get(holding.mint)
            if price is None:
                unpriced.append(holding)
            else:
                priced.append(snapshot(holding, price))
        return priced, unpriced

    async def check_holdings(self) -> list[PositionSnapshot]:
        """Run one pass over the ledger; return the snapshots that were priced."""
        priced, unpriced = await self.snapshots()
        for holding in unpriced:
            logger.warning("No price for %s, skipping this pass", holding.display_name)

        for snap in priced:
            mint = snap.holding.mint

            floor = self._cfg.remove_worthless_below_usd
            if floor > 0 and snap.price < floor:
                logger.info(
                    "Removing worthless holding %s (price %s < %s)",
                    snap.holding.display_name, snap.price, floor,
                )
                self._ledger.remove_entry(mint)
                continue

            if not self._cfg.auto_sell or self._executor is None:
                continue
            if mint in self._halted:
                logger.debug("Automated exits halted for %s", mint)
                continue

            reason = self._exit_reason(snap)
            if reason is None:
                continue

            logger.info(
                "Selling %s on %s (PnL %.2f%%)", snap.holding.display_name, reason, snap.pnl_pct
            )
            result = await self._executor.sell(self._quote_mint, mint, snap.holding.units)

            if result.success:
                await self._notify.send_log(
                    build_sell_message(snap.holding, result.tx_id, snap.pnl_usd, snap.pnl_pct),
                    silent=False,
                )
            elif result.status is SwapStatus.BALANCE_MISMATCH:
                self._halted.add(mint)
                await self._notify.send_alert(
                    f"{result.reason}\n\nAutomated exits for {mint} are halted until restart.",
                    subject="Balance mismatch",
                )
            elif result.status is not SwapStatus.LOST_TRACK:
                logger.warning("Exit for %s failed, will retry next pass: %s", mint, result.reason)

        return priced

    async def render_holdings(self) -> str:
        """Console listing of open holdings with current PnL."""
        priced, unpriced = await self.snapshots()
        lines = [format_holding_line(snap) for snap in priced]
        lines.extend(f"{h.display_name}: price unavailable" for h in unpriced)
        if not lines:
            lines.append(
                f"No token holdings yet as of {datetime.now(timezone.utc).isoformat()}"
            )
        if self._cfg.track_public_wallet:
            lines.append(f"\nCheck your wallet: {GMGN_WALLET_URL}{self._cfg.track_public_wallet}")
        return "\n".join(lines)

    async def run_continuous(self, interval: float | None = None) -> None:
        """Check holdings forever, ``interval`` seconds apart."""
        interval = interval or self._cfg.check_interval
        logger.info("Starting exit monitor (checking every %s seconds)", interval)

        while True:
            try:
                await self.check_holdings()
            except Exception as e:
                logger.error("Error in exit monitor loop: %s", e)
            await asyncio.sleep(interval)
