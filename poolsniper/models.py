"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


@dataclass(frozen=True)
class PoolEvent:
    """One log batch pushed by the event source."""

    signature: str
    log_lines: tuple[str, ...] = ()


@dataclass(frozen=True)
class MintPair:
    """Base/quote mints taken from a pool-initialization instruction."""

    base_mint: str
    quote_mint: str


@dataclass(frozen=True)
class TopHolder:
    address: str
    pct: float
    insider: bool = False


@dataclass(frozen=True)
class MarketInfo:
    pubkey: str = ""
    liquidity_a: str = ""
    liquidity_b: str = ""


@dataclass(frozen=True)
class RiskReport:
    """Risk provider snapshot for one asset."""

    mint: str
    mint_authority: str | None = None
    freeze_authority: str | None = None
    is_initialized: bool = True
    mutable: bool = False
    name: str = ""
    symbol: str = ""
    creator: str = ""
    top_holders: tuple[TopHolder, ...] = ()
    markets: tuple[MarketInfo, ...] = ()
    total_lp_providers: int = 0
    total_market_liquidity: float = 0.0
    rugged: bool = False
    score: float = 0.0
    risks: tuple[str, ...] = ()
    detected_at: datetime | None = None

    @property
    def market_count(self) -> int:
        return len(self.markets)


@dataclass(frozen=True)
class RiskVerdict:
    passed: bool
    first_failed_rule: str | None = None
    detail: str = ""
    # Report the verdict was reached on, when one was fetched.
    report: RiskReport | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Holding:
    """One open position. Keyed by ``mint`` in the holdings store."""

    mint: str
    name: str
    entry_time: int
    units: float
    sol_spent: float
    sol_fee_spent: float
    sol_spent_usd: float
    sol_fee_usd: float
    per_unit_usd: float
    slot: int = 0
    program: str = "N/A"

    @property
    def display_name(self) -> str:
        return self.mint if not self.name or self.name == "N/A" else self.name


@dataclass(frozen=True)
class TokenSeenRecord:
    mint: str
    name: str
    creator: str
    first_seen: int


class SwapStatus(Enum):
    SUCCESS = "success"
    REJECTED = "rejected"
    SUBMIT_FAILED = "submit_failed"
    FAILED_ON_CHAIN = "failed_on_chain"
    LOST_TRACK = "lost_track"
    BALANCE_MISMATCH = "balance_mismatch"


@dataclass(frozen=True)
class SwapResult:
    status: SwapStatus
    tx_id: str = ""
    reason: str = ""

    @property
    def success(self) -> bool:
        return self.status is SwapStatus.SUCCESS

    @classmethod
    def ok(cls, tx_id: str) -> SwapResult:
        return cls(status=SwapStatus.SUCCESS, tx_id=tx_id)

    @classmethod
    def failed(cls, status: SwapStatus, reason: str, tx_id: str = "") -> SwapResult:
        return cls(status=status, tx_id=tx_id, reason=reason)


@dataclass(frozen=True)
class SwapDetails:
    """What a confirmed buy actually moved, per the transaction-detail provider."""

    mint: str
    units: float
    sol_spent: float
    fee_lamports: int
    slot: int
    timestamp: int
    program: str = "N/A"


@dataclass(frozen=True)
class PositionSnapshot:
    holding: Holding
    price: float
    pnl_usd: float
    pnl_pct: float
