"""Service modules"""
from .exit_monitor import ExitMonitor
from .gate import ConcurrencyGate, Permit
from .ledger import HoldingsLedger
from .pipeline import PoolPipeline
from .resolver import TransactionResolver
from .risk_engine import RiskEngine
from .swap_executor import SwapExecutor
from .watcher import EventWatcher, WatcherState

__all__ = [
    "ConcurrencyGate",
    "EventWatcher",
    "ExitMonitor",
    "HoldingsLedger",
    "Permit",
    "PoolPipeline",
    "RiskEngine",
    "SwapExecutor",
    "TransactionResolver",
    "WatcherState",
]
