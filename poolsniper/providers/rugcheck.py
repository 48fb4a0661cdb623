"""Rug-check report provider (rugcheck.xyz)."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from .. import http
from ..config import EndpointsConfig
from ..errors import ProviderError
from ..models import MarketInfo, RiskReport, TopHolder

logger = logging.getLogger(__name__)

# Stands in for an authority the report does not state; rules treat it as set.
UNKNOWN_AUTHORITY = "unknown"


def _parse_timestamp(value: Any) -> datetime | None:
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Unparseable detectedAt value: %s", value)
        return None


def parse_report(mint: str, data: dict[str, Any]) -> RiskReport:
    """Map a rugcheck report body onto a RiskReport."""
    token = data.get("token") or {}
    meta = data.get("tokenMeta") or {}

    top_holders = tuple(
        TopHolder(
            address=h.get("address", ""),
            pct=float(h.get("pct", 0.0)),
            insider=bool(h.get("insider", False)),
        )
        for h in data.get("topHolders") or []
    )
    markets = tuple(
        MarketInfo(
            pubkey=m.get("pubkey", ""),
            liquidity_a=m.get("liquidityA") or "",
            liquidity_b=m.get("liquidityB") or "",
        )
        for m in data.get("markets") or []
    )
    risks = tuple(r.get("name", "") for r in data.get("risks") or [])

    return RiskReport(
        mint=mint,
        mint_authority=token.get("mintAuthority", UNKNOWN_AUTHORITY),
        freeze_authority=token.get("freezeAuthority", UNKNOWN_AUTHORITY),
        is_initialized=bool(token.get("isInitialized", False)),
        mutable=meta.get("mutable") is not False,
        name=meta.get("name") or "",
        symbol=meta.get("symbol") or "",
        creator=data.get("creator") or "",
        top_holders=top_holders,
        markets=markets,
        total_lp_providers=int(data.get("totalLPProviders") or 0),
        total_market_liquidity=float(data.get("totalMarketLiquidity") or 0.0),
        rugged=bool(data.get("rugged", False)),
        score=float(data.get("score") or 0.0),
        risks=risks,
        detected_at=_parse_timestamp(data.get("detectedAt")),
    )


class RugCheckClient:
    """Fetch risk reports by mint."""

    def __init__(self, config: EndpointsConfig, verbose: bool = False) -> None:
        self.base_url = config.rug_report.rstrip("/")
        self.timeout = config.request_timeout
        self.verbose = verbose

    async def fetch_report(self, mint: str) -> RiskReport:
        url = f"{self.base_url}/{mint}/report"
        try:
            async with http.client_session(self.timeout) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        raise ProviderError(f"Rug report request failed: HTTP {response.status}")
                    data = await response.json()
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(f"Rug report request failed: {e}") from e

        if not isinstance(data, dict) or not data:
            raise ProviderError("Rug report response is empty")

        if self.verbose:
            logger.info("Rug report for %s: %s", mint, data)
        return parse_report(mint, data)
