"""Exception hierarchy for the sniper pipeline."""
from __future__ import annotations


class SniperError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(SniperError, ValueError):
    """Missing or invalid configuration. Fatal at startup only."""


class ProviderError(SniperError):
    """An external provider timed out, failed, or returned a malformed payload."""


class QuoteError(ProviderError):
    """The quote provider refused to quote."""

    def __init__(self, message: str, status: int = 0, error_code: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.error_code = error_code


class TokenNotTradableError(QuoteError):
    """The asset was listed moments ago and cannot be routed yet."""


class ResolutionError(SniperError):
    """A transaction detail payload did not contain a usable mint pair."""


class BalanceMismatchError(SniperError):
    """On-chain balance disagrees with the ledger. Needs operator attention."""

    def __init__(self, mint: str, expected: int, actual: int) -> None:
        super().__init__(
            f"Wallet and ledger balance mismatch for {mint}: "
            f"ledger {expected}, wallet {actual}"
        )
        self.mint = mint
        self.expected = expected
        self.actual = actual
