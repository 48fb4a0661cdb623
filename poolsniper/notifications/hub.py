"""Fan-out to every configured notifier. Delivery is best-effort."""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from ..config import NotificationsConfig
from ..interfaces.notifier import Notifier
from ..models import Holding, RiskReport
from .telegram import TelegramNotifier

logger = logging.getLogger(__name__)

GMGN_TOKEN_URL = "https://gmgn.ai/sol/token/"
BULLX_TOKEN_URL = "https://neo.bullx.io/terminal?chainId=1399811149&address="
SOLSCAN_TX_URL = "https://solscan.io/tx/"


def _now_str() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def token_links(mint: str) -> str:
    return f"GMGN: {GMGN_TOKEN_URL}{mint}\nBullX: {BULLX_TOKEN_URL}{mint}"


def build_passed_message(mint: str, report: RiskReport | None = None) -> str:
    label = ""
    if report is not None and (report.symbol or report.name):
        label = f"{report.symbol or report.name}\n"
    return (
        f"✅ Token passed risk checks\n"
        f"\n"
        f"{label}"
        f"<code>{mint}</code>\n"
        f"\n"
        f"{token_links(mint)}\n"
        f"\n"
        f"{_now_str()} UTC"
    )


def build_buy_message(holding: Holding, tx_id: str) -> str:
    return (
        f"🟢 Bought {holding.units:,.2f} {holding.display_name}\n"
        f"\n"
        f"Spent: {holding.sol_spent:.4f} SOL (${holding.sol_spent_usd:,.2f})\n"
        f"Fee: ${holding.sol_fee_usd:.4f}\n"
        f"Via: {holding.program}\n"
        f"\n"
        f"{SOLSCAN_TX_URL}{tx_id}\n"
        f"{_now_str()} UTC"
    )


def build_sell_message(holding: Holding, tx_id: str, pnl_usd: float, pnl_pct: float) -> str:
    icon = "🟢" if pnl_usd > 0 else "🔴"
    return (
        f"{icon} Sold {holding.units:,.2f} {holding.display_name}\n"
        f"\n"
        f"PnL: ${pnl_usd:,.2f} ({pnl_pct:.2f}%)\n"
        f"\n"
        f"{SOLSCAN_TX_URL}{tx_id}\n"
        f"{_now_str()} UTC"
    )


class NotificationHub:
    """Send to all notifiers; a failing channel is logged and skipped."""

    def __init__(self, notifiers: list[Notifier] | None = None) -> None:
        self._notifiers: list[Notifier] = list(notifiers or [])

    @classmethod
    def from_config(cls, config: NotificationsConfig, timeout: int = 10) -> NotificationHub:
        notifiers: list[Notifier] = []
        if config.telegram.enabled:
            notifiers.append(TelegramNotifier(config.telegram, timeout=timeout))
        return cls(notifiers)

    @property
    def enabled(self) -> bool:
        return bool(self._notifiers)

    async def send_log(self, message: str, silent: bool = True) -> None:
        for notifier in self._notifiers:
            try:
                await notifier.send_log(message, silent=silent)
            except Exception as e:
                logger.error("Notifier send_log failed: %s", e)

    async def send_alert(self, message: str, subject: str = "") -> None:
        for notifier in self._notifiers:
            try:
                await notifier.send_alert(message, subject=subject)
            except Exception as e:
                logger.error("Notifier send_alert failed: %s", e)
