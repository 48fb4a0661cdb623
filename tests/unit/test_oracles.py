"""Unit tests for the price oracles."""
from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from poolsniper.config import WSOL_MINT
from poolsniper.oracles import DexScreenerOracle, FallbackPriceOracle, JupiterPriceOracle
from poolsniper.oracles.jupiter import _extract_price

from helpers import BASE_MINT, mock_http_session


class TestExtractPrice:
    def test_prefers_last_sell_price(self) -> None:
        entry = {
            "price": "1.10",
            "extraInfo": {"lastSwappedPrice": {"lastJupiterSellPrice": "1.05"}},
        }
        assert _extract_price(entry) == 1.05

    def test_falls_back_to_price(self) -> None:
        assert _extract_price({"price": "2.5", "extraInfo": {}}) == 2.5

    def test_unparseable(self) -> None:
        assert _extract_price({"price": "n/a"}) == 0.0


class TestJupiterPriceOracle:
    @pytest.mark.asyncio
    async def test_fetch_prices(self) -> None:
        data = {
            "data": {
                WSOL_MINT: {"id": WSOL_MINT, "price": "180.25"},
                BASE_MINT: {
                    "id": BASE_MINT,
                    "price": "0.0021",
                    "extraInfo": {"lastSwappedPrice": {"lastJupiterSellPrice": "0.002"}},
                },
                "Unpriced": None,
            }
        }
        session = mock_http_session(data)
        oracle = JupiterPriceOracle("https://price.example.com")

        with patch("poolsniper.http.aiohttp.ClientSession", return_value=session):
            with patch("poolsniper.http.aiohttp.TCPConnector"):
                prices = await oracle.fetch_prices([WSOL_MINT, BASE_MINT, "Unpriced"])

        assert prices == {WSOL_MINT: 180.25, BASE_MINT: 0.002}
        params = session.get.call_args.kwargs["params"]
        assert params["showExtraInfo"] == "true"
        assert set(params["ids"].split(",")) == {WSOL_MINT, BASE_MINT, "Unpriced"}

    @pytest.mark.asyncio
    async def test_http_error_returns_empty(self) -> None:
        session = mock_http_session({}, status=500)
        with patch("poolsniper.http.aiohttp.ClientSession", return_value=session):
            with patch("poolsniper.http.aiohttp.TCPConnector"):
                prices = await JupiterPriceOracle("https://p").fetch_prices([BASE_MINT])
        assert prices == {}

    @pytest.mark.asyncio
    async def test_exception_returns_empty(self) -> None:
        session = mock_http_session(error=ConnectionError("down"))
        with patch("poolsniper.http.aiohttp.ClientSession", return_value=session):
            with patch("poolsniper.http.aiohttp.TCPConnector"):
                prices = await JupiterPriceOracle("https://p").fetch_prices([BASE_MINT])
        assert prices == {}

    @pytest.mark.asyncio
    async def test_no_mints_no_request(self) -> None:
        with patch("poolsniper.http.aiohttp.ClientSession") as session_cls:
            assert await JupiterPriceOracle("https://p").fetch_prices([]) == {}
        session_cls.assert_not_called()


class TestDexScreenerOracle:
    @pytest.mark.asyncio
    async def test_uses_most_liquid_pair(self) -> None:
        data = {
            "pairs": [
                {"baseToken": {"address": BASE_MINT}, "priceUsd": "0.0030", "liquidity": {"usd": 500}},
                {"baseToken": {"address": BASE_MINT}, "priceUsd": "0.0025", "liquidity": {"usd": 9000}},
                {"baseToken": {"address": "Other"}, "priceUsd": "9", "liquidity": {"usd": 1}},
            ]
        }
        session = mock_http_session(data)
        oracle = DexScreenerOracle("https://dex.example.com/tokens/")

        with patch("poolsniper.http.aiohttp.ClientSession", return_value=session):
            with patch("poolsniper.http.aiohttp.TCPConnector"):
                prices = await oracle.fetch_prices([BASE_MINT])

        assert prices == {BASE_MINT: 0.0025}
        assert session.get.call_args[0][0] == f"https://dex.example.com/tokens/{BASE_MINT}"

    @pytest.mark.asyncio
    async def test_no_pairs(self) -> None:
        session = mock_http_session({"pairs": None})
        with patch("poolsniper.http.aiohttp.ClientSession", return_value=session):
            with patch("poolsniper.http.aiohttp.TCPConnector"):
                assert await DexScreenerOracle("https://d").fetch_prices([BASE_MINT]) == {}


class TestFallbackPriceOracle:
    @pytest.mark.asyncio
    async def test_secondary_only_for_missing(self) -> None:
        primary, secondary = AsyncMock(), AsyncMock()
        primary.fetch_prices.return_value = {"A": 1.0}
        secondary.fetch_prices.return_value = {"B": 2.0}

        prices = await FallbackPriceOracle(primary, secondary).fetch_prices(["A", "B", "C"])

        assert prices == {"A": 1.0, "B": 2.0}
        secondary.fetch_prices.assert_awaited_once_with(["B", "C"])

    @pytest.mark.asyncio
    async def test_secondary_skipped_when_complete(self) -> None:
        primary, secondary = AsyncMock(), AsyncMock()
        primary.fetch_prices.return_value = {"A": 1.0}

        await FallbackPriceOracle(primary, secondary).fetch_prices(["A"])

        secondary.fetch_prices.assert_not_called()

    @pytest.mark.asyncio
    async def test_without_secondary(self) -> None:
        primary = AsyncMock()
        primary.fetch_prices.return_value = {}
        assert await FallbackPriceOracle(primary).fetch_prices(["A"]) == {}
