"""Solana new-pool sniper: watch, vet, buy, track, exit."""

__version__ = "0.1.0"
