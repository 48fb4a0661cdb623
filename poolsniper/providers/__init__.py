"""Request/response providers: transaction detail, risk report, swap build."""
from .helius import HeliusClient
from .jupiter import JupiterClient
from .rugcheck import RugCheckClient

__all__ = ["HeliusClient", "JupiterClient", "RugCheckClient"]
