from .client import HeliusClient

__all__ = ["HeliusClient"]
