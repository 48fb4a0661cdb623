"""Primary/secondary price feed composition."""
import logging

from ..interfaces.price_oracle import PriceOracle

logger = logging.getLogger(__name__)


class FallbackPriceOracle:
    """Ask the primary feed first, then the secondary for whatever is missing."""

    def __init__(self, primary: PriceOracle, secondary: PriceOracle | None = None) -> None:
        self._primary = primary
        self._secondary = secondary

    async def fetch_prices(self, mints: list[str]) -> dict[str, float]:
        prices = dict(await self._primary.fetch_prices(mints))

        missing = [m for m in mints if m not in prices]
        if missing and self._secondary is not None:
            logger.info("Primary feed has no price for %d mint(s), trying secondary", len(missing))
            prices.update(await self._secondary.fetch_prices(missing))

        return prices
