from __future__ import annotations

from typing import Any, Mapping

import pytest

from cryptomatrix.contexts.matrices.adapters.outbound.persistence.postgres import (
    PostgresTickerReader,
)
from cryptomatrix.contexts.matrices.application.dto import TickerPrice


class _FakeGateway:
    def __init__(self, fetch_all_results: list[tuple[Mapping[str, Any], ...]] | None = None) -> None:  # noqa: E501
        self._fetch_all_results = list(fetch_all_results or [])
        self.fetch_all_calls: list[tuple[str, Mapping[str, Any]]] = []

    def fetch_one(self, *, query: str, parameters: Mapping[str, Any]) -> Mapping[str, Any] | None:
        raise AssertionError("ticker reader must not use fetch_one")

    def fetch_all(
        self,
        *,
        query: str,
        parameters: Mapping[str, Any],
    ) -> tuple[Mapping[str, Any], ...]:
        self.fetch_all_calls.append((query, dict(parameters)))
        if not self._fetch_all_results:
            return ()
        return self._fetch_all_results.pop(0)


def test_latest_prices_maps_rows_and_skips_null_prices() -> None:
    gateway = _FakeGateway(
        [
            (
                {"symbol": "btcusdt", "price": "100.5", "ts_ms": 1_000},
                {"symbol": "ETHUSDT", "price": None, "ts_ms": 1_000},
                {"symbol": "SOLUSDT", "price": 20, "ts_ms": None},
            )
        ]
    )
    reader = PostgresTickerReader(gateway=gateway)

    prices = reader.latest_prices(["BTCUSDT", "ethusdt", "SOLUSDT", "BTCUSDT"])

    assert prices == {
        "BTCUSDT": TickerPrice(symbol="BTCUSDT", price=100.5, ts=1_000),
        "SOLUSDT": TickerPrice(symbol="SOLUSDT", price=20.0, ts=None),
    }
    query, parameters = gateway.fetch_all_calls[0]
    assert "FROM market.ticker_latest" in query
    assert "(EXTRACT(EPOCH FROM ts) * 1000)::bigint AS ts_ms" in query
    assert parameters == {"symbols": ["BTCUSDT", "ETHUSDT", "SOLUSDT"]}


def test_prices_hours_ago_reads_last_tick_before_lookback() -> None:
    gateway = _FakeGateway(
        [
            (
                {"symbol": "BTCUSDT", "price": 80.0},
                {"symbol": "ETHUSDT", "price": float("inf")},
            )
        ]
    )
    reader = PostgresTickerReader(gateway=gateway, ticks_table="custom.ticks")

    prices = reader.prices_hours_ago(["BTCUSDT", "ETHUSDT"], 24)

    assert prices == {"BTCUSDT": 80.0}
    query, parameters = gateway.fetch_all_calls[0]
    assert "FROM custom.ticks" in query
    assert "row_number() OVER (PARTITION BY symbol ORDER BY ts DESC)" in query
    assert "ts <= now() - make_interval(hours => %(hours)s)" in query
    assert parameters == {"symbols": ["BTCUSDT", "ETHUSDT"], "hours": 24}


def test_empty_symbol_list_skips_storage() -> None:
    gateway = _FakeGateway()
    reader = PostgresTickerReader(gateway=gateway)

    assert reader.latest_prices([]) == {}
    assert reader.prices_hours_ago([" "], 24) == {}
    assert gateway.fetch_all_calls == []


def test_prices_hours_ago_rejects_non_positive_lookback() -> None:
    reader = PostgresTickerReader(gateway=_FakeGateway())

    with pytest.raises(ValueError):
        reader.prices_hours_ago(["BTCUSDT"], 0)
