from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Mapping

from cryptomatrix.contexts.matrices.application.ports.clock import Clock
from cryptomatrix.contexts.matrices.application.ports.stores import TickerReader
from cryptomatrix.contexts.matrices.domain.entities import (
    DEFAULT_PIVOT,
    CoinUniverse,
    GridBuilder,
    LiveGrid,
    LiveGrids,
)

log = logging.getLogger(__name__)

DEFAULT_LOOKBACK_HOURS = 24


@dataclass(frozen=True, slots=True)
class LiveGridBuilder:
    """
    Build live benchmark and 24h-change grids from raw ticker prices.

    Related:
      - src/cryptomatrix/contexts/matrices/application/ports/stores/ticker_reader.py
      - src/cryptomatrix/contexts/matrices/adapters/outbound/persistence/postgres/ticker_reader.py
      - src/cryptomatrix/contexts/matrices/application/use_cases/build_latest_matrices.py
    """

    reader: TickerReader
    clock: Clock
    pivot: str = DEFAULT_PIVOT
    lookback_hours: int = DEFAULT_LOOKBACK_HOURS

    def __post_init__(self) -> None:
        if self.reader is None:  # type: ignore[truthy-bool]
            raise ValueError("LiveGridBuilder requires reader")
        if self.clock is None:  # type: ignore[truthy-bool]
            raise ValueError("LiveGridBuilder requires clock")
        if isinstance(self.lookback_hours, bool) or self.lookback_hours <= 0:
            raise ValueError(f"LiveGridBuilder.lookback_hours must be > 0, got {self.lookback_hours}")  # noqa: E501

    def build(self, requested_coins: Iterable[str]) -> LiveGrids:
        """
        Build live grids over the requested coins that currently have a price.

        Args:
            requested_coins: Raw coin list; normalized and de-duplicated, pivot appended.
        Returns:
            LiveGrids: Universe of priced coins plus `benchmark` and `pct24h` grids sharing
            one timestamp `max(now, freshest ticker ts)`.
        Assumptions:
            Exchange symbols are `<COIN><PIVOT>`; the pivot itself is priced at 1.
        Raises:
            ValueError: If a requested coin is not a valid symbol.
            Exception: Ticker reader errors are propagated unchanged.
        Side Effects:
            Executes two ticker reads.
        """
        seed = CoinUniverse.build(requested_coins, pivot=self.pivot)
        pivot = seed.pivot
        symbol_by_coin = {coin: f"{coin}{pivot}" for coin in seed.non_pivot()}
        symbols = tuple(symbol_by_coin.values())

        latest = self.reader.latest_prices(symbols) if symbols else {}
        ts = self.clock.now().epoch_ms
        prices: dict[str, float] = {pivot: 1.0}
        for coin, symbol in symbol_by_coin.items():
            entry = latest.get(symbol)
            if entry is None or not math.isfinite(entry.price):
                continue
            prices[coin] = entry.price
            if entry.ts is not None and entry.ts > ts:
                ts = entry.ts

        coins = CoinUniverse(
            coins=tuple(coin for coin in seed.coins if coin in prices),
            pivot=pivot,
        )
        dropped = seed.size - coins.size
        if dropped:
            log.info("live grid dropped %d coin(s) without a current price", dropped)

        opens = self.reader.prices_hours_ago(symbols, self.lookback_hours) if symbols else {}
        returns = _returns(coins, prices, opens, symbol_by_coin)

        benchmark = GridBuilder(coins.size)
        pct24h = GridBuilder(coins.size)
        for i, base in enumerate(coins):
            for j, quote in enumerate(coins):
                if i == j:
                    continue
                benchmark.set(i, j, _ratio(prices.get(base), prices.get(quote)))
                pct24h.set(i, j, _relative_return(returns.get(base), returns.get(quote)))

        return LiveGrids(
            coins=coins,
            benchmark=LiveGrid(ts=ts, grid=benchmark.build()),
            pct24h=LiveGrid(ts=ts, grid=pct24h.build()),
        )


def _returns(
    coins: CoinUniverse,
    prices: Mapping[str, float],
    opens: Mapping[str, float],
    symbol_by_coin: Mapping[str, str],
) -> dict[str, float | None]:
    out: dict[str, float | None] = {coins.pivot: 0.0}
    for coin in coins.non_pivot():
        now = prices[coin]
        open_price = opens.get(symbol_by_coin[coin])
        if open_price is None or not math.isfinite(open_price) or open_price == 0:
            out[coin] = None
            continue
        out[coin] = (now - open_price) / open_price
    return out


def _ratio(base_price: float | None, quote_price: float | None) -> float | None:
    if base_price is None or quote_price is None:
        return None
    if not math.isfinite(base_price) or not math.isfinite(quote_price) or quote_price == 0:
        return None
    return base_price / quote_price


def _relative_return(base_return: float | None, quote_return: float | None) -> float | None:
    if base_return is None or quote_return is None:
        return None
    growth_base = 1 + base_return
    growth_quote = 1 + quote_return
    if not math.isfinite(growth_base) or not math.isfinite(growth_quote) or growth_quote == 0:
        return None
    return growth_base / growth_quote - 1
