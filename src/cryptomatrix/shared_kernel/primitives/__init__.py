"""
Shared Kernel primitives.

This package re-exports the minimal set of primitives so that other
modules can import them from one place:

    from cryptomatrix.shared_kernel.primitives import CoinSymbol, UtcTimestamp
"""

from .coin_symbol import CoinSymbol
from .utc_timestamp import UtcTimestamp

__all__ = [
    "CoinSymbol",
    "UtcTimestamp",
]
