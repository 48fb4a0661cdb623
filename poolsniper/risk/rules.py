"""Ordered risk rules — pure functions over a report snapshot, no I/O.

Each rule answers "is this report unacceptable?". Rules run in table order
and the first one that fires names the verdict.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from ..config import RugCheckConfig
from ..models import RiskReport, RiskVerdict, TopHolder


@dataclass(frozen=True)
class RiskContext:
    """What every predicate sees: the report, the holders after LP exclusion,
    and the asset age in minutes (None when the report has no timestamp)."""

    report: RiskReport
    top_holders: tuple[TopHolder, ...]
    age_minutes: float | None


@dataclass(frozen=True)
class RiskRule:
    name: str
    fails: Callable[[RiskContext], bool]
    detail: Callable[[RiskContext], str] = lambda ctx: ""


def exclude_lp_holders(report: RiskReport) -> tuple[TopHolder, ...]:
    """Drop top holders that are LP vault accounts of one of the markets."""
    lp_accounts = {
        account
        for market in report.markets
        for account in (market.liquidity_a, market.liquidity_b)
        if account
    }
    return tuple(h for h in report.top_holders if h.address not in lp_accounts)


def build_context(
    report: RiskReport, cfg: RugCheckConfig, now: datetime
) -> RiskContext:
    holders = exclude_lp_holders(report) if cfg.exclude_lp_from_topholders else report.top_holders

    age = None
    if report.detected_at is not None:
        detected = report.detected_at
        if detected.tzinfo is None:
            detected = detected.replace(tzinfo=timezone.utc)
        age = (now - detected).total_seconds() / 60

    return RiskContext(report=report, top_holders=holders, age_minutes=age)


def _matches_blocklist(report: RiskReport, cfg: RugCheckConfig) -> bool:
    return report.symbol in cfg.block_symbols or report.name in cfg.block_names


def build_rules(cfg: RugCheckConfig) -> list[RiskRule]:
    """Return the rule table for ``cfg``, in evaluation order."""
    return [
        RiskRule(
            "mint_authority",
            lambda ctx: not cfg.allow_mint_authority and ctx.report.mint_authority is not None,
            lambda ctx: f"mint authority {ctx.report.mint_authority}",
        ),
        RiskRule(
            "not_initialized",
            lambda ctx: not cfg.allow_not_initialized and not ctx.report.is_initialized,
        ),
        RiskRule(
            "freeze_authority",
            lambda ctx: not cfg.allow_freeze_authority and ctx.report.freeze_authority is not None,
            lambda ctx: f"freeze authority {ctx.report.freeze_authority}",
        ),
        RiskRule(
            "mutable_metadata",
            lambda ctx: not cfg.allow_mutable and ctx.report.mutable,
        ),
        RiskRule(
            "insider_top_holders",
            lambda ctx: not cfg.allow_insider_topholders
            and any(h.insider for h in ctx.top_holders),
        ),
        RiskRule(
            "top_holder_concentration",
            lambda ctx: any(h.pct > cfg.max_allowed_pct_topholders for h in ctx.top_holders),
            lambda ctx: f"max holder {max((h.pct for h in ctx.top_holders), default=0):.2f}%",
        ),
        RiskRule(
            "min_lp_providers",
            lambda ctx: ctx.report.total_lp_providers < cfg.min_total_lp_providers,
            lambda ctx: f"{ctx.report.total_lp_providers} LP providers",
        ),
        RiskRule(
            "min_markets",
            lambda ctx: ctx.report.market_count < cfg.min_total_markets,
            lambda ctx: f"{ctx.report.market_count} markets",
        ),
        RiskRule(
            "min_market_liquidity",
            lambda ctx: ctx.report.total_market_liquidity < cfg.min_total_market_liquidity,
            lambda ctx: f"liquidity ${ctx.report.total_market_liquidity:,.2f}",
        ),
        RiskRule(
            "rugged",
            lambda ctx: not cfg.allow_rugged and ctx.report.rugged,
        ),
        RiskRule(
            "blocked_symbol_or_name",
            lambda ctx: _matches_blocklist(ctx.report, cfg),
            lambda ctx: f"{ctx.report.symbol} / {ctx.report.name}",
        ),
        RiskRule(
            "max_score",
            lambda ctx: cfg.max_score > 0 and ctx.report.score > cfg.max_score,
            lambda ctx: f"score {ctx.report.score}",
        ),
        RiskRule(
            "legacy_risks",
            lambda ctx: any(r in cfg.legacy_not_allowed for r in ctx.report.risks),
            lambda ctx: ", ".join(r for r in ctx.report.risks if r in cfg.legacy_not_allowed),
        ),
        RiskRule(
            "max_token_age",
            lambda ctx: cfg.max_token_age_minutes > 0
            and ctx.age_minutes is not None
            and ctx.age_minutes > cfg.max_token_age_minutes,
            lambda ctx: f"age {ctx.age_minutes:.1f} min",
        ),
    ]


def evaluate_report(
    report: RiskReport, cfg: RugCheckConfig, now: datetime
) -> RiskVerdict:
    """Run the rule table against ``report``; the first failing rule wins."""
    ctx = build_context(report, cfg, now)
    for rule in build_rules(cfg):
        if rule.fails(ctx):
            return RiskVerdict(passed=False, first_failed_rule=rule.name, detail=rule.detail(ctx))
    return RiskVerdict(passed=True)
