"""Chain client protocol — ledger network RPC abstraction."""
from typing import Any, Protocol


class ChainClient(Protocol):
    """Abstract interface for submitting and confirming transactions."""

    async def get_latest_blockhash(self) -> tuple[str, int]: ...

    async def get_block_height(self) -> int: ...

    async def send_raw_transaction(self, raw: bytes, skip_preflight: bool = True) -> str: ...

    async def get_signature_status(self, signature: str) -> dict[str, Any] | None: ...

    async def get_token_balance(self, owner: str, mint: str) -> tuple[int, int]: ...
