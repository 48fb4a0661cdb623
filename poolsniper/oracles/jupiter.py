"""Jupiter price API oracle (primary feed)."""
import logging
from typing import Any

from .. import http

logger = logging.getLogger(__name__)


def _extract_price(entry: dict[str, Any]) -> float:
    """Prefer the last Jupiter sell price, fall back to the derived price."""
    extra = entry.get("extraInfo") or {}
    last_sell = (extra.get("lastSwappedPrice") or {}).get("lastJupiterSellPrice")
    raw = last_sell if last_sell is not None else entry.get("price")
    try:
        return float(raw) if raw is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


class JupiterPriceOracle:
    """Fetch USD prices from the Jupiter price API."""

    def __init__(self, price_url: str, timeout: int = 10) -> None:
        self.price_url = price_url
        self.timeout = timeout

    async def fetch_prices(self, mints: list[str]) -> dict[str, float]:
        """Fetch current prices for ``mints``.

        Mints the API has no (or a zero) price for are left out of the
        result. Errors are logged and yield an empty dict.
        """
        prices: dict[str, float] = {}
        ids = sorted(set(m for m in mints if m))
        if not ids:
            return prices

        params = {"ids": ",".join(ids), "showExtraInfo": "true"}

        try:
            async with http.client_session(self.timeout) as session:
                async with session.get(self.price_url, params=params) as response:
                    if response.status != 200:
                        logger.error(
                            "Error fetching prices from Jupiter: HTTP %s", response.status
                        )
                        return prices

                    data = await response.json()
                    for mint, entry in (data.get("data") or {}).items():
                        if not entry:
                            continue
                        price = _extract_price(entry)
                        if price > 0:
                            prices[mint] = price

        except Exception as e:
            logger.error("Error fetching prices from Jupiter: %s", e)

        logger.debug("Jupiter priced %d of %d mints", len(prices), len(ids))
        return prices
