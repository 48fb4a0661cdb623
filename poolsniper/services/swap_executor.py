"""Swap lifecycle: quote → build → sign → submit → confirm.

Buys record the resulting position in the ledger once the swap detail is
available; sells verify the wallet balance against the ledger first and
close the position on success.
"""
from __future__ import annotations

import asyncio
import base64
import logging
import time
from typing import Any

from solders.keypair import Keypair
from solders.transaction import VersionedTransaction

from ..config import WSOL_MINT, SellConfig, SwapConfig
from ..errors import (
    BalanceMismatchError,
    ProviderError,
    QuoteError,
    ResolutionError,
    TokenNotTradableError,
)
from ..interfaces.chain import ChainClient
from ..interfaces.price_oracle import PriceOracle
from ..interfaces.providers import SwapProvider, TransactionDetailProvider
from ..models import Holding, SwapDetails, SwapResult, SwapStatus
from ..notifications import NotificationHub
from ..notifications.hub import build_buy_message
from ..providers.helius.parser import lamports_to_sol, parse_swap_details
from ..storage import SeenTokenStore
from .ledger import HoldingsLedger

logger = logging.getLogger(__name__)

CONFIRMED_STATUSES = ("confirmed", "finalized")


def load_keypair(private_key: str) -> Keypair | None:
    """Wallet keypair from its base58 secret, or None when no key is set."""
    if not private_key:
        return None
    return Keypair.from_base58_string(private_key)


def sign_transaction(serialized: str, keypair: Keypair) -> bytes:
    """Decode a base64 swap transaction, sign it and return the wire bytes."""
    unsigned = VersionedTransaction.from_bytes(base64.b64decode(serialized))
    signed = VersionedTransaction(unsigned.message, [keypair])
    return bytes(signed)


def holding_from_details(details: SwapDetails, sol_price: float, name: str) -> Holding:
    """Price a confirmed buy in USD and turn it into a ledger entry."""
    fee_sol = lamports_to_sol(details.fee_lamports)
    spent_usd = details.sol_spent * sol_price
    return Holding(
        mint=details.mint,
        name=name or "N/A",
        entry_time=details.timestamp * 1000,
        units=details.units,
        sol_spent=details.sol_spent,
        sol_fee_spent=fee_sol,
        sol_spent_usd=spent_usd,
        sol_fee_usd=fee_sol * sol_price,
        per_unit_usd=spent_usd / details.units if details.units else 0.0,
        slot=details.slot,
        program=details.program,
    )


class SwapExecutor:
    """Execute buys and sells through the quote/build provider and the chain."""

    def __init__(
        self,
        swap_provider: SwapProvider,
        chain: ChainClient,
        ledger: HoldingsLedger,
        detail_provider: TransactionDetailProvider,
        sol_price_oracle: PriceOracle,
        seen_store: SeenTokenStore,
        swap_config: SwapConfig,
        sell_config: SellConfig,
        keypair: Keypair | None,
        notifications: NotificationHub | None = None,
        sleep=asyncio.sleep,
        clock=time.monotonic,
    ) -> None:
        self._swap = swap_provider
        self._chain = chain
        self._ledger = ledger
        self._details = detail_provider
        self._sol_price = sol_price_oracle
        self._seen = seen_store
        self._swap_cfg = swap_config
        self._sell_cfg = sell_config
        self._keypair = keypair
        self._notify = notifications or NotificationHub()
        self._sleep = sleep
        self._clock = clock

    @property
    def wallet_address(self) -> str:
        return str(self._keypair.pubkey()) if self._keypair is not None else ""

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def buy(self, quote_mint: str, base_mint: str) -> SwapResult:
        """Spend ``swap.amount`` of the quote asset on ``base_mint``."""
        result = await self._execute(
            input_mint=quote_mint,
            output_mint=base_mint,
            amount=self._swap_cfg.amount,
            slippage_bps=self._swap_cfg.slippage_bps,
            prio_fee_max_lamports=self._swap_cfg.prio_fee_max_lamports,
            prio_level=self._swap_cfg.prio_level,
        )
        if result.success:
            logger.info("Buy of %s confirmed: %s", base_mint, result.tx_id)
            await self._record_buy(result.tx_id)
        else:
            logger.warning("Buy of %s failed (%s): %s", base_mint, result.status.value, result.reason)
        return result

    async def sell(self, quote_mint: str, base_mint: str, units: float) -> SwapResult:
        """Sell the full recorded position of ``base_mint`` back to the quote asset."""
        if self._keypair is None:
            return SwapResult.failed(SwapStatus.REJECTED, "No wallet key configured")

        try:
            raw_amount = await self._check_sell_balance(base_mint, units)
        except BalanceMismatchError as e:
            logger.error("%s", e)
            return SwapResult.failed(SwapStatus.BALANCE_MISMATCH, str(e))
        except ProviderError as e:
            logger.error("Could not read wallet balance for %s: %s", base_mint, e)
            return SwapResult.failed(SwapStatus.REJECTED, f"Balance check failed: {e}")

        if raw_amount == 0:
            self._ledger.remove_entry(base_mint)
            reason = f"Wallet holds no {base_mint}; removed from holdings"
            logger.warning("%s", reason)
            await self._notify.send_alert(reason, subject="Lost track of holding")
            return SwapResult.failed(SwapStatus.LOST_TRACK, reason)

        result = await self._execute(
            input_mint=base_mint,
            output_mint=quote_mint,
            amount=raw_amount,
            slippage_bps=self._sell_cfg.slippage_bps,
            prio_fee_max_lamports=self._sell_cfg.prio_fee_max_lamports,
            prio_level=self._sell_cfg.prio_level,
        )
        if result.success:
            logger.info("Sell of %s confirmed: %s", base_mint, result.tx_id)
            self._ledger.remove_entry(base_mint)
        else:
            logger.warning("Sell of %s failed (%s): %s", base_mint, result.status.value, result.reason)
        return result

    # ------------------------------------------------------------------
    # Swap lifecycle
    # ------------------------------------------------------------------

    async def _execute(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        slippage_bps: int,
        prio_fee_max_lamports: int,
        prio_level: str,
    ) -> SwapResult:
        if self._keypair is None:
            return SwapResult.failed(SwapStatus.REJECTED, "No wallet key configured")

        try:
            quote = await self._get_quote(input_mint, output_mint, amount, slippage_bps)
        except ProviderError as e:
            return SwapResult.failed(SwapStatus.REJECTED, f"Quote failed: {e}")

        try:
            serialized = await self._swap.build_swap(
                quote,
                self.wallet_address,
                prio_fee_max_lamports,
                prio_level,
                self._swap_cfg.dynamic_slippage_max_bps,
            )
        except ProviderError as e:
            return SwapResult.failed(SwapStatus.REJECTED, f"Swap build failed: {e}")

        try:
            raw = sign_transaction(serialized, self._keypair)
            tx_id = await self._chain.send_raw_transaction(raw, skip_preflight=True)
        except Exception as e:
            return SwapResult.failed(SwapStatus.SUBMIT_FAILED, f"Submit failed: {e}")

        logger.info("Submitted swap %s → %s: %s", input_mint, output_mint, tx_id)
        return await self._confirm(tx_id)

    async def _get_quote(
        self, input_mint: str, output_mint: str, amount: int, slippage_bps: int
    ) -> dict[str, Any]:
        """Quote, retrying only while the output asset is not tradable yet."""
        attempts = max(1, self._swap_cfg.not_tradable_retries)
        for attempt in range(1, attempts + 1):
            try:
                return await self._swap.get_quote(input_mint, output_mint, amount, slippage_bps)
            except TokenNotTradableError as e:
                if attempt == attempts:
                    raise
                logger.info(
                    "Token not tradable yet (attempt %d/%d), retrying in %.1fs: %s",
                    attempt, attempts, self._swap_cfg.not_tradable_delay, e,
                )
                await self._sleep(self._swap_cfg.not_tradable_delay)
        raise QuoteError("Quote retries exhausted")

    async def _confirm(self, tx_id: str) -> SwapResult:
        """Poll the signature until it confirms, fails, or its blockhash expires."""
        try:
            _, last_valid_height = await self._chain.get_latest_blockhash()
        except ProviderError as e:
            logger.warning("Could not fetch blockhash for confirmation of %s: %s", tx_id, e)
            last_valid_height = None

        deadline = self._clock() + self._swap_cfg.confirm_timeout
        while True:
            try:
                status = await self._chain.get_signature_status(tx_id)
                if status:
                    if status.get("err") is not None:
                        return SwapResult.failed(
                            SwapStatus.FAILED_ON_CHAIN, f"Transaction error: {status['err']}", tx_id
                        )
                    if status.get("confirmationStatus") in CONFIRMED_STATUSES:
                        return SwapResult.ok(tx_id)

                if last_valid_height is not None:
                    height = await self._chain.get_block_height()
                    if height > last_valid_height:
                        return SwapResult.failed(
                            SwapStatus.SUBMIT_FAILED, "Blockhash expired before confirmation", tx_id
                        )
            except ProviderError as e:
                logger.warning("Confirmation poll for %s failed: %s", tx_id, e)

            if self._clock() >= deadline:
                return SwapResult.failed(
                    SwapStatus.SUBMIT_FAILED, "Timed out waiting for confirmation", tx_id
                )
            await self._sleep(self._swap_cfg.confirm_poll_interval)

    async def _check_sell_balance(self, mint: str, units: float) -> int:
        """Return the raw wallet balance, or raise if it disagrees with ``units``."""
        raw, decimals = await self._chain.get_token_balance(self.wallet_address, mint)
        if raw == 0:
            return 0
        expected = round(units * 10**decimals)
        if raw != expected:
            raise BalanceMismatchError(mint, expected, raw)
        return raw

    # ------------------------------------------------------------------
    # Post-buy bookkeeping
    # ------------------------------------------------------------------

    async def _record_buy(self, tx_id: str) -> None:
        try:
            details = await self._fetch_swap_details(tx_id)
            prices = await self._sol_price.fetch_prices([WSOL_MINT])
            sol_price = prices.get(WSOL_MINT)
            if not sol_price:
                raise ProviderError("No SOL price available")

            seen = self._seen.find_by_mint(details.mint)
            holding = holding_from_details(details, sol_price, seen.name if seen else "N/A")
            holding = self._ledger.record_entry(holding)
        except Exception as e:
            logger.error("Could not record holding for %s: %s", tx_id, e)
            await self._notify.send_alert(
                f"Swap {tx_id} confirmed but the holding was not recorded: {e}",
                subject="Holding not recorded",
            )
            return

        if self._swap_cfg.verbose_log:
            logger.info("Recorded holding: %s", holding)
        await self._notify.send_log(build_buy_message(holding, tx_id), silent=False)

    async def _fetch_swap_details(self, tx_id: str) -> SwapDetails:
        attempts = max(1, self._swap_cfg.detail_retries)
        last_error: Exception | None = None
        for attempt in range(1, attempts + 1):
            try:
                transactions = await self._details.fetch_transactions([tx_id])
                return parse_swap_details(transactions)
            except (ProviderError, ResolutionError) as e:
                last_error = e
                logger.warning(
                    "Swap detail for %s not available (attempt %d/%d): %s",
                    tx_id, attempt, attempts, e,
                )
                if attempt < attempts:
                    await self._sleep(self._swap_cfg.detail_retry_delay)
        raise ProviderError(f"Swap detail unavailable: {last_error}")
