"""Helpers shared by test modules (importable, unlike conftest)."""
from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

from poolsniper.config import RAYDIUM_AMM_PROGRAM_ID, WSOL_MINT

BASE_MINT = "7GCihgDB8fe6KNjn2MYtkzZcRjQy3t9GHdC8uHYmW2hr"
FAKE_PRIVATE_KEY = "5" * 88


def mock_http_session(
    response_data=None, status: int = 200, error: Exception | None = None
) -> AsyncMock:
    """Create a mock aiohttp session whose get/post return ``response_data``."""
    mock_response = AsyncMock()
    mock_response.status = status
    if error:
        mock_response.json = AsyncMock(side_effect=error)
    else:
        mock_response.json = AsyncMock(return_value=response_data)
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)

    mock_session = AsyncMock()
    mock_session.get = MagicMock(return_value=mock_response)
    mock_session.post = MagicMock(return_value=mock_response)
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=None)
    return mock_session


def pool_init_transaction(
    base_mint: str = BASE_MINT,
    quote_mint: str = WSOL_MINT,
    program_id: str = RAYDIUM_AMM_PROGRAM_ID,
    swap_order: bool = False,
    account_count: int = 18,
) -> list[dict]:
    """Enhanced-transaction payload for a pool initialization."""
    accounts = [f"Account{i}" for i in range(account_count)]
    if account_count >= 10:
        accounts[8], accounts[9] = (
            (quote_mint, base_mint) if swap_order else (base_mint, quote_mint)
        )
    return [
        {
            "signature": "sig1",
            "instructions": [
                {"programId": "ComputeBudget111111111111111111111111111111", "accounts": []},
                {"programId": program_id, "accounts": accounts},
            ],
        }
    ]
