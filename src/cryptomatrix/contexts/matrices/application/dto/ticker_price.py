from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TickerPrice:
    """
    Latest ticker price of one exchange symbol (e.g. `BTCUSDT`) and its time in epoch ms.

    Related:
      - src/cryptomatrix/contexts/matrices/application/ports/stores/ticker_reader.py
      - src/cryptomatrix/contexts/matrices/application/services/live_grid_builder.py
    """

    symbol: str
    price: float
    ts: int | None = None

    def __post_init__(self) -> None:
        normalized = str(self.symbol or "").strip().upper()
        if not normalized:
            raise ValueError("TickerPrice.symbol must be non-empty")
        object.__setattr__(self, "symbol", normalized)
        object.__setattr__(self, "price", float(self.price))
