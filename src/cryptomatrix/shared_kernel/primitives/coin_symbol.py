from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CoinSymbol:
    """
    CoinSymbol — asset ticker used as a row/column key of every matrix (e.g. "BTC", "USDT").

    Rules:
    - normalization: strip + upper
    - invariant: non-empty after normalization, no whitespace or pair separator inside
    """

    value: str

    def __post_init__(self) -> None:
        normalized = str(self.value).strip().upper()
        object.__setattr__(self, "value", normalized)

        if not normalized:
            raise ValueError("CoinSymbol must be non-empty after normalization")
        if any(ch.isspace() for ch in normalized) or "/" in normalized:
            raise ValueError(f"CoinSymbol must be a single token, got {normalized!r}")

    def pair_symbol(self, quote: CoinSymbol) -> str:
        """Exchange-style pair symbol for this coin against `quote` (BTC + USDT -> "BTCUSDT")."""
        return f"{self.value}{quote.value}"

    def __str__(self) -> str:
        return self.value
