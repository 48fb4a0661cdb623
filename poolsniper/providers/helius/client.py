"""Enhanced transaction-detail client (Helius ``/v0/transactions``)."""
from __future__ import annotations

import logging
from typing import Any

from ... import http
from ...config import EndpointsConfig
from ...errors import ProviderError

logger = logging.getLogger(__name__)


class HeliusClient:
    """Fetch parsed transaction details by signature."""

    def __init__(self, config: EndpointsConfig, commitment: str = "confirmed") -> None:
        self.url = config.tx_detail
        self.timeout = config.request_timeout
        self.commitment = commitment

    async def fetch_transactions(self, signatures: list[str]) -> list[dict[str, Any]]:
        """POST the signatures and return the raw detail array.

        Raises:
            ProviderError: on HTTP failure or a non-array body.
        """
        payload = {
            "transactions": signatures,
            "commitment": self.commitment,
            "encoding": "jsonParsed",
        }

        try:
            async with http.client_session(self.timeout) as session:
                async with session.post(self.url, json=payload) as response:
                    if response.status != 200:
                        raise ProviderError(
                            f"Transaction detail request failed: HTTP {response.status}"
                        )
                    data = await response.json()
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(f"Transaction detail request failed: {e}") from e

        if not isinstance(data, list):
            raise ProviderError("Transaction detail response is not an array")
        return data
