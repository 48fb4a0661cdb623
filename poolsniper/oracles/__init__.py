"""Price oracles."""
from .dexscreener import DexScreenerOracle
from .fallback import FallbackPriceOracle
from .jupiter import JupiterPriceOracle

__all__ = ["DexScreenerOracle", "FallbackPriceOracle", "JupiterPriceOracle"]
