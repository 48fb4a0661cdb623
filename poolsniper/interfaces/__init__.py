"""Protocol interfaces for the pool sniper."""
from .chain import ChainClient
from .event_source import EventSource
from .notifier import Notifier
from .price_oracle import PriceOracle
from .providers import RiskReportProvider, SwapProvider, TransactionDetailProvider

__all__ = [
    "ChainClient",
    "EventSource",
    "Notifier",
    "PriceOracle",
    "RiskReportProvider",
    "SwapProvider",
    "TransactionDetailProvider",
]
