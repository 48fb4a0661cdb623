"""Risk evaluation: one report fetch, duplicate blocking, ordered rule table."""
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone

from ..config import RugCheckConfig
from ..errors import ProviderError
from ..interfaces.providers import RiskReportProvider
from ..models import RiskReport, RiskVerdict, TokenSeenRecord
from ..risk.rules import evaluate_report
from ..storage import SeenTokenStore

logger = logging.getLogger(__name__)


class RiskEngine:
    """Decide whether a freshly listed asset may be bought."""

    def __init__(
        self,
        provider: RiskReportProvider,
        seen_store: SeenTokenStore,
        config: RugCheckConfig,
    ) -> None:
        self._provider = provider
        self._seen = seen_store
        self._cfg = config

    async def evaluate(self, mint: str, now: datetime | None = None) -> RiskVerdict:
        now = now or datetime.now(timezone.utc)

        try:
            report = await self._provider.fetch_report(mint)
        except ProviderError as e:
            logger.warning("No risk report for %s: %s", mint, e)
            return RiskVerdict(passed=False, first_failed_rule="report_unavailable", detail=str(e))

        duplicate = self._check_returning(report)
        self._remember(report, now)
        if duplicate is not None:
            logger.info("Rejected %s: %s", mint, duplicate.first_failed_rule)
            return replace(duplicate, report=report)

        verdict = replace(evaluate_report(report, self._cfg, now), report=report)
        if verdict.passed:
            logger.info("Risk check passed for %s (%s)", mint, report.symbol or report.name)
        else:
            logger.info(
                "Risk check failed for %s on %s %s",
                mint, verdict.first_failed_rule, verdict.detail,
            )
        return verdict

    def _check_returning(self, report: RiskReport) -> RiskVerdict | None:
        if not (self._cfg.block_returning_token_names or self._cfg.block_returning_token_creators):
            return None

        try:
            previous = self._seen.find_by_name_or_creator(report.name, report.creator)
        except Exception as e:
            logger.error("Seen-token lookup failed for %s: %s", report.mint, e)
            return None

        if self._cfg.block_returning_token_names and report.name:
            if any(r.name == report.name for r in previous):
                return RiskVerdict(
                    passed=False, first_failed_rule="returning_token_name", detail=report.name
                )
        if self._cfg.block_returning_token_creators and report.creator:
            if any(r.creator == report.creator for r in previous):
                return RiskVerdict(
                    passed=False, first_failed_rule="returning_token_creator", detail=report.creator
                )
        return None

    def _remember(self, report: RiskReport, now: datetime) -> None:
        record = TokenSeenRecord(
            mint=report.mint,
            name=report.name,
            creator=report.creator,
            first_seen=int(now.timestamp() * 1000),
        )
        try:
            self._seen.append(record)
        except Exception as e:
            logger.error("Could not record seen token %s: %s", report.mint, e)
