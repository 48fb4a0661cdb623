"""Solana JSON-RPC client with fallback support."""
from __future__ import annotations

import base64
import logging
from typing import Any

from ... import http
from ...config import EndpointsConfig
from ...errors import ProviderError

logger = logging.getLogger(__name__)


class SolanaClient:
    """Solana RPC client with automatic endpoint fallback."""

    def __init__(self, config: EndpointsConfig, commitment: str = "confirmed") -> None:
        self.endpoints = list(config.rpc_http)
        self.timeout = config.request_timeout
        self.commitment = commitment
        self.current_rpc_index = 0

    async def rpc_call(self, method: str, params: list[Any]) -> Any:
        """Make RPC call with fallback to alternative endpoints."""
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}

        last_error: Exception | None = None
        for attempt in range(len(self.endpoints)):
            rpc_index = (self.current_rpc_index + attempt) % len(self.endpoints)
            rpc_url = self.endpoints[rpc_index]

            try:
                async with http.client_session(self.timeout) as session:
                    async with session.post(rpc_url, json=payload) as response:
                        result = await response.json()
                        if "error" in result:
                            raise ProviderError(f"RPC Error: {result['error']}")

                        if rpc_index != self.current_rpc_index:
                            logger.info("Switched to RPC endpoint: %s", rpc_url)
                            self.current_rpc_index = rpc_index

                        return result.get("result")
            except Exception as e:
                last_error = e
                logger.warning("RPC endpoint %s failed on %s: %s", rpc_url, method, e)
                if attempt < len(self.endpoints) - 1:
                    logger.info("Trying next endpoint...")
                continue

        raise ProviderError(f"All RPC endpoints failed. Last error: {last_error}")

    async def get_latest_blockhash(self) -> tuple[str, int]:
        """Return ``(blockhash, last_valid_block_height)``."""
        result = await self.rpc_call(
            "getLatestBlockhash", [{"commitment": self.commitment}]
        )
        value = (result or {}).get("value", {})
        blockhash = value.get("blockhash")
        height = value.get("lastValidBlockHeight")
        if not blockhash or height is None:
            raise ProviderError("getLatestBlockhash returned no blockhash")
        return blockhash, int(height)

    async def get_block_height(self) -> int:
        result = await self.rpc_call("getBlockHeight", [{"commitment": self.commitment}])
        return int(result)

    async def send_raw_transaction(self, raw: bytes, skip_preflight: bool = True) -> str:
        """Submit a signed, serialized transaction and return its signature."""
        encoded = base64.b64encode(raw).decode("ascii")
        signature = await self.rpc_call(
            "sendTransaction",
            [
                encoded,
                {
                    "encoding": "base64",
                    "skipPreflight": skip_preflight,
                    "maxRetries": 2,
                },
            ],
        )
        if not signature:
            raise ProviderError("sendTransaction returned no signature")
        return str(signature)

    async def get_signature_status(self, signature: str) -> dict[str, Any] | None:
        """Return the status entry for one signature, or None if unknown yet."""
        result = await self.rpc_call(
            "getSignatureStatuses",
            [[signature], {"searchTransactionHistory": False}],
        )
        statuses = (result or {}).get("value") or []
        return statuses[0] if statuses else None

    async def get_token_balance(self, owner: str, mint: str) -> tuple[int, int]:
        """Sum the owner's token accounts for ``mint``.

        Returns:
            ``(raw_amount, decimals)``. ``(0, 0)`` when the owner holds no
            account for the mint.
        """
        result = await self.rpc_call(
            "getTokenAccountsByOwner",
            [owner, {"mint": mint}, {"encoding": "jsonParsed", "commitment": self.commitment}],
        )
        accounts = (result or {}).get("value") or []

        total = 0
        decimals = 0
        for account in accounts:
            token_amount = (
                account.get("account", {})
                .get("data", {})
                .get("parsed", {})
                .get("info", {})
                .get("tokenAmount", {})
            )
            total += int(token_amount.get("amount", 0))
            decimals = int(token_amount.get("decimals", decimals))
        return total, decimals
