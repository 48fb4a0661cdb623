"""Pure parsing functions for enhanced transaction payloads — no I/O."""
from __future__ import annotations

from typing import Any

from ...errors import ResolutionError
from ...models import MintPair, SwapDetails

MIN_POOL_INIT_ACCOUNTS = 10
BASE_MINT_INDEX = 8
QUOTE_MINT_INDEX = 9
LAMPORTS_PER_SOL = 1_000_000_000


def _first_transaction(transactions: Any) -> dict[str, Any]:
    if not isinstance(transactions, list) or not transactions:
        raise ResolutionError("Response data array is empty")
    tx = transactions[0]
    if not tx:
        raise ResolutionError("Transaction not found")
    if not isinstance(tx, dict):
        raise ResolutionError("Malformed transaction entry")
    return tx


def extract_mint_pair(
    transactions: Any, program_id: str, quote_mint: str
) -> MintPair:
    """Locate the pool-initialization instruction and split its mints.

    The instruction owned by ``program_id`` must carry at least 10 accounts;
    positions 8 and 9 are the two mints. Whichever equals ``quote_mint`` is
    the quote side.

    Raises:
        ResolutionError: for every structural problem in the payload.
    """
    tx = _first_transaction(transactions)

    instructions = tx.get("instructions")
    if not isinstance(instructions, list) or not instructions:
        raise ResolutionError("No instructions found in transaction")

    instruction = next(
        (
            ix
            for ix in instructions
            if isinstance(ix, dict) and ix.get("programId") == program_id
        ),
        None,
    )
    if instruction is None or not instruction.get("accounts"):
        raise ResolutionError("No pool program instruction found")

    accounts = instruction["accounts"]
    if not isinstance(accounts, list) or len(accounts) < MIN_POOL_INIT_ACCOUNTS:
        raise ResolutionError("Invalid accounts array in instruction")

    account_one = accounts[BASE_MINT_INDEX]
    account_two = accounts[QUOTE_MINT_INDEX]
    if not account_one or not account_two:
        raise ResolutionError("Required accounts not found")

    if account_one == quote_mint:
        return MintPair(base_mint=account_two, quote_mint=account_one)
    return MintPair(base_mint=account_one, quote_mint=account_two)


def parse_swap_details(transactions: Any) -> SwapDetails:
    """Read what a confirmed swap moved from ``events.swap.innerSwaps``.

    The first inner swap's first input is the SOL paid; the last inner
    swap's first output is the token received.
    """
    tx = _first_transaction(transactions)

    swap_event = (tx.get("events") or {}).get("swap") or {}
    inner_swaps = swap_event.get("innerSwaps") if isinstance(swap_event, dict) else None
    if not isinstance(inner_swaps, list) or not inner_swaps:
        raise ResolutionError("No swap event found in transaction")
    if not all(isinstance(s, dict) for s in inner_swaps):
        raise ResolutionError("Malformed inner swap entry")

    token_inputs = inner_swaps[0].get("tokenInputs") or []
    token_outputs = inner_swaps[-1].get("tokenOutputs") or []
    if not token_inputs or not token_outputs:
        raise ResolutionError("Swap event is missing token inputs or outputs")
    if not isinstance(token_inputs[0], dict) or not isinstance(token_outputs[0], dict):
        raise ResolutionError("Swap event is missing token inputs or outputs")

    program_info = inner_swaps[0].get("programInfo") or {}

    return SwapDetails(
        mint=token_outputs[0].get("mint", ""),
        units=float(token_outputs[0].get("tokenAmount", 0)),
        sol_spent=float(token_inputs[0].get("tokenAmount", 0)),
        fee_lamports=int(tx.get("fee", 0)),
        slot=int(tx.get("slot", 0)),
        timestamp=int(tx.get("timestamp", 0)),
        program=program_info.get("source") or "N/A",
    )


def lamports_to_sol(lamports: int) -> float:
    return lamports / LAMPORTS_PER_SOL
