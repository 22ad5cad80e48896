from __future__ import annotations

import math
from typing import Mapping, Sequence

from cryptomatrix.contexts.matrices.adapters.outbound.persistence.postgres.gateway import (
    MatricesPostgresGateway,
)
from cryptomatrix.contexts.matrices.application.dto import TickerPrice
from cryptomatrix.contexts.matrices.application.ports.stores import TickerReader


class PostgresTickerReader(TickerReader):
    """
    PostgresTickerReader — explicit SQL adapter over latest tickers and ticker history.

    Related:
      - src/cryptomatrix/contexts/matrices/application/ports/stores/ticker_reader.py
      - src/cryptomatrix/contexts/matrices/application/services/live_grid_builder.py
      - src/cryptomatrix/contexts/matrices/adapters/outbound/persistence/postgres/gateway.py
    """

    def __init__(
        self,
        *,
        gateway: MatricesPostgresGateway,
        latest_table: str = "market.ticker_latest",
        ticks_table: str = "market.ticker_ticks",
    ) -> None:
        if gateway is None:  # type: ignore[truthy-bool]
            raise ValueError("PostgresTickerReader requires gateway")
        normalized_latest = latest_table.strip()
        normalized_ticks = ticks_table.strip()
        if not normalized_latest or not normalized_ticks:
            raise ValueError("PostgresTickerReader requires non-empty table names")
        self._gateway = gateway
        self._latest_table = normalized_latest
        self._ticks_table = normalized_ticks

    def latest_prices(self, symbols: Sequence[str]) -> Mapping[str, TickerPrice]:
        """
        Return latest price and its time per symbol.

        Args:
            symbols: Exchange symbols such as `BTCUSDT`.
        Returns:
            Mapping[str, TickerPrice]: Prices keyed by upper-cased symbol; rows with `NULL`
            price are skipped.
        Assumptions:
            Ticker time column `ts` is `timestamptz`.
        Raises:
            Exception: Propagates gateway errors.
        Side Effects:
            Executes one SQL select statement.
        """
        normalized = _normalize_symbols(symbols)
        if not normalized:
            return {}
        query = f"""
        SELECT
            symbol,
            price,
            (EXTRACT(EPOCH FROM ts) * 1000)::bigint AS ts_ms
        FROM {self._latest_table}
        WHERE symbol = ANY(%(symbols)s)
        """
        rows = self._gateway.fetch_all(query=query, parameters={"symbols": normalized})
        prices: dict[str, TickerPrice] = {}
        for row in rows:
            if row.get("price") is None:
                continue
            ts_ms = row.get("ts_ms")
            price = TickerPrice(
                symbol=str(row["symbol"]),
                price=float(row["price"]),
                ts=None if ts_ms is None else int(ts_ms),
            )
            prices[price.symbol] = price
        return prices

    def prices_hours_ago(self, symbols: Sequence[str], hours: int) -> Mapping[str, float]:
        """
        Return, per symbol, the last tick at or before `now() - hours`.

        Args:
            symbols: Exchange symbols.
            hours: Lookback in hours.
        Returns:
            Mapping[str, float]: Finite prices keyed by upper-cased symbol.
        Assumptions:
            Database clock defines "now" for the lookback.
        Raises:
            ValueError: If `hours` is not positive.
            Exception: Propagates gateway errors.
        Side Effects:
            Executes one SQL select statement.
        """
        if hours <= 0:
            raise ValueError(f"PostgresTickerReader lookback hours must be > 0, got {hours}")
        normalized = _normalize_symbols(symbols)
        if not normalized:
            return {}
        query = f"""
        WITH ranked AS (
            SELECT
                symbol,
                price,
                row_number() OVER (PARTITION BY symbol ORDER BY ts DESC) AS rn
            FROM {self._ticks_table}
            WHERE symbol = ANY(%(symbols)s)
              AND ts <= now() - make_interval(hours => %(hours)s)
        )
        SELECT symbol, price
        FROM ranked
        WHERE rn = 1
        """
        rows = self._gateway.fetch_all(
            query=query,
            parameters={"symbols": normalized, "hours": int(hours)},
        )
        prices: dict[str, float] = {}
        for row in rows:
            raw = row.get("price")
            if raw is None:
                continue
            price = float(raw)
            if math.isfinite(price):
                prices[str(row["symbol"]).strip().upper()] = price
        return prices


def _normalize_symbols(symbols: Sequence[str]) -> list[str]:
    out: list[str] = []
    for symbol in symbols:
        normalized = str(symbol or "").strip().upper()
        if normalized and normalized not in out:
            out.append(normalized)
    return out
