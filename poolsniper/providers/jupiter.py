"""Jupiter quote and swap-build provider."""
from __future__ import annotations

import logging
from typing import Any

from .. import http
from ..config import EndpointsConfig
from ..errors import ProviderError, QuoteError, TokenNotTradableError

logger = logging.getLogger(__name__)

NOT_TRADABLE_ERROR_CODE = "TOKEN_NOT_TRADABLE"


class JupiterClient:
    """Quote a route and build the serialized swap transaction for it."""

    def __init__(self, config: EndpointsConfig, verbose: bool = False) -> None:
        self.quote_url = config.quote
        self.swap_url = config.swap
        self.timeout = config.request_timeout
        self.verbose = verbose

    async def get_quote(
        self, input_mint: str, output_mint: str, amount: int, slippage_bps: int
    ) -> dict[str, Any]:
        """Return the quote body.

        Raises:
            TokenNotTradableError: the output asset has no route yet.
            QuoteError: any other refusal.
        """
        params = {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": str(amount),
            "slippageBps": str(slippage_bps),
        }

        try:
            async with http.client_session(self.timeout) as session:
                async with session.get(self.quote_url, params=params) as response:
                    data = await response.json(content_type=None)
                    status = response.status
        except Exception as e:
            raise QuoteError(f"Quote request failed: {e}") from e

        if status != 200:
            error_code = data.get("errorCode", "") if isinstance(data, dict) else ""
            message = data.get("error", "") if isinstance(data, dict) else ""
            if status == 400 and error_code == NOT_TRADABLE_ERROR_CODE:
                raise TokenNotTradableError(
                    message or "Token not tradable yet", status=status, error_code=error_code
                )
            raise QuoteError(
                f"Quote refused: HTTP {status} {error_code} {message}".strip(),
                status=status,
                error_code=error_code,
            )

        if not isinstance(data, dict) or not data.get("outAmount"):
            raise QuoteError("Quote response has no outAmount", status=status)

        if self.verbose:
            logger.info("Quote: %s", data)
        return data

    async def build_swap(
        self,
        quote: dict[str, Any],
        user_public_key: str,
        prio_fee_max_lamports: int,
        prio_level: str,
        dynamic_slippage_max_bps: int,
    ) -> str:
        """Return the base64 serialized swap transaction."""
        payload = {
            "quoteResponse": quote,
            "userPublicKey": user_public_key,
            "wrapAndUnwrapSol": True,
            "dynamicSlippage": {"maxBps": dynamic_slippage_max_bps},
            "prioritizationFeeLamports": {
                "priorityLevelWithMaxLamports": {
                    "maxLamports": prio_fee_max_lamports,
                    "priorityLevel": prio_level,
                },
            },
        }

        try:
            async with http.client_session(self.timeout) as session:
                async with session.post(self.swap_url, json=payload) as response:
                    if response.status != 200:
                        raise ProviderError(f"Swap build failed: HTTP {response.status}")
                    data = await response.json()
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(f"Swap build failed: {e}") from e

        serialized = data.get("swapTransaction") if isinstance(data, dict) else None
        if not serialized:
            raise ProviderError("Swap build response has no swapTransaction")

        if self.verbose:
            logger.info("Swap build: %s", {k: v for k, v in data.items() if k != "swapTransaction"})
        return serialized
