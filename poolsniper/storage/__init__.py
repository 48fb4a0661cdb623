"""SQLite-backed record stores."""
from .holdings import HoldingsStore
from .seen_tokens import SeenTokenStore

__all__ = ["HoldingsStore", "SeenTokenStore"]
