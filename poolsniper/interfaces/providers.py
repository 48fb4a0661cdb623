"""Request/response providers consumed by the pipeline."""
from typing import Any, Protocol

from ..models import RiskReport


class TransactionDetailProvider(Protocol):
    """Parsed transaction details by signature."""

    async def fetch_transactions(self, signatures: list[str]) -> list[dict[str, Any]]: ...


class RiskReportProvider(Protocol):
    """Third-party rug/risk report by mint."""

    async def fetch_report(self, mint: str) -> RiskReport: ...


class SwapProvider(Protocol):
    """Swap quote and transaction-building service."""

    async def get_quote(
        self, input_mint: str, output_mint: str, amount: int, slippage_bps: int
    ) -> dict[str, Any]: ...

    async def build_swap(
        self,
        quote: dict[str, Any],
        user_public_key: str,
        prio_fee_max_lamports: int,
        prio_level: str,
        dynamic_slippage_max_bps: int,
    ) -> str: ...
