"""Solana ledger network and log-stream clients."""
from .client import SolanaClient
from .logs import SolanaLogsSource

__all__ = ["SolanaClient", "SolanaLogsSource"]
