"""DexScreener token-pairs oracle (secondary feed)."""
import logging

from .. import http

logger = logging.getLogger(__name__)


class DexScreenerOracle:
    """Fetch USD prices from DexScreener's latest token pairs."""

    def __init__(self, tokens_url: str, timeout: int = 10) -> None:
        self.tokens_url = tokens_url.rstrip("/")
        self.timeout = timeout

    async def fetch_prices(self, mints: list[str]) -> dict[str, float]:
        """Price each mint from its most liquid pair."""
        prices: dict[str, float] = {}
        ids = sorted(set(m for m in mints if m))
        if not ids:
            return prices

        url = f"{self.tokens_url}/{','.join(ids)}"
        best_liquidity: dict[str, float] = {}

        try:
            async with http.client_session(self.timeout) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        logger.error(
                            "Error fetching prices from DexScreener: HTTP %s",
                            response.status,
                        )
                        return prices

                    data = await response.json()
                    for pair in data.get("pairs") or []:
                        mint = (pair.get("baseToken") or {}).get("address")
                        if mint not in ids:
                            continue
                        try:
                            price = float(pair.get("priceUsd") or 0)
                        except (TypeError, ValueError):
                            continue
                        liquidity = float((pair.get("liquidity") or {}).get("usd") or 0)
                        if price > 0 and liquidity >= best_liquidity.get(mint, -1.0):
                            best_liquidity[mint] = liquidity
                            prices[mint] = price

        except Exception as e:
            logger.error("Error fetching prices from DexScreener: %s", e)

        return prices
