"""Holdings ledger — the only writer of holding rows — and PnL maths."""
from __future__ import annotations

import logging
from dataclasses import replace

from ..models import Holding
from ..storage import HoldingsStore

logger = logging.getLogger(__name__)


def calc_unrealized_pnl(holding: Holding, price: float) -> float:
    """USD PnL: value change of the units held, net of the buy fee."""
    return (price - holding.per_unit_usd) * holding.units - holding.sol_fee_usd


def calc_unrealized_pnl_percent(holding: Holding, price: float) -> float:
    cost = holding.per_unit_usd * holding.units
    if cost == 0:
        return 0.0
    return calc_unrealized_pnl(holding, price) / cost * 100


def merge_holdings(existing: Holding, new: Holding) -> Holding:
    """Fold a re-buy into the open position for the same mint."""
    units = existing.units + new.units
    spent_usd = existing.sol_spent_usd + new.sol_spent_usd
    return replace(
        existing,
        name=existing.name if existing.name and existing.name != "N/A" else new.name,
        units=units,
        sol_spent=existing.sol_spent + new.sol_spent,
        sol_fee_spent=existing.sol_fee_spent + new.sol_fee_spent,
        sol_spent_usd=spent_usd,
        sol_fee_usd=existing.sol_fee_usd + new.sol_fee_usd,
        per_unit_usd=spent_usd / units if units else 0.0,
    )


class HoldingsLedger:
    """One open holding per mint. Re-buys merge; exits are idempotent."""

    def __init__(self, store: HoldingsStore) -> None:
        self._store = store

    def record_entry(self, holding: Holding) -> Holding:
        existing = self._store.get(holding.mint)
        if existing is not None:
            holding = merge_holdings(existing, holding)
            logger.info("Merged re-buy into open holding %s (%s units)", holding.mint, holding.units)
        else:
            logger.info("Opened holding %s (%s units)", holding.mint, holding.units)
        self._store.upsert(holding)
        return holding

    def remove_entry(self, mint: str) -> bool:
        removed = self._store.delete(mint)
        if removed:
            logger.info("Removed holding %s", mint)
        else:
            logger.debug("No open holding for %s, nothing removed", mint)
        return removed

    def get(self, mint: str) -> Holding | None:
        return self._store.get(mint)

    def list_open(self) -> list[Holding]:
        return self._store.select_all()
