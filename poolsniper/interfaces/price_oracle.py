"""Price oracle protocol — price feed abstraction."""
from typing import Protocol


class PriceOracle(Protocol):
    """Abstract interface for fetching per-unit USD prices by mint."""

    async def fetch_prices(self, mints: list[str]) -> dict[str, float]: ...
