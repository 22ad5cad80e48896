from __future__ import annotations

from typing import Any, Mapping, Sequence

import pytest

from cryptomatrix.contexts.matrices.adapters.outbound.cache import InMemoryOpeningTimestampCache
from cryptomatrix.contexts.matrices.application import BuildLatestMatricesUseCase
from cryptomatrix.contexts.matrices.application.dto import StampedRows, TickerPrice
from cryptomatrix.contexts.matrices.application.services import (
    LiveGridBuilder,
    OpeningGridResolver,
    SnapshotGridResolver,
    TradeGridResolver,
)
from cryptomatrix.contexts.matrices.domain.entities import (
    MatrixType,
    MatrixValueRow,
    SessionKey,
    TradeStampConvention,
)
from cryptomatrix.platform.errors.crypto_matrix_error import CryptoMatrixError
from cryptomatrix.shared_kernel.primitives import UtcTimestamp

_NOW_MS = 1_700_000_000_000


class _FixedClock:
    def now(self) -> UtcTimestamp:
        return UtcTimestamp.from_epoch_ms(_NOW_MS)


class _FakeTickerReader:
    def latest_prices(self, symbols: Sequence[str]) -> Mapping[str, TickerPrice]:
        prices = {"BTCUSDT": 100.0, "ETHUSDT": 50.0}
        return {
            symbol: TickerPrice(symbol=symbol, price=prices[symbol], ts=_NOW_MS - 1)
            for symbol in symbols
            if symbol in prices
        }

    def prices_hours_ago(self, symbols: Sequence[str], hours: int) -> Mapping[str, float]:
        return {"BTCUSDT": 80.0, "ETHUSDT": 50.0}


class _FakeMatricesStore:
    """
    Single in-memory store serving both previous-value and anchor reads.

    Related:
      - src/cryptomatrix/contexts/matrices/adapters/outbound/persistence/postgres/
        matrix_series_reader.py
    """

    def __init__(self) -> None:
        self.sessions: list[SessionKey] = []
        self.batch_calls = 0

    def previous_value(self, **kwargs: Any) -> float | None:
        self.sessions.append(kwargs["session_key"])
        return None

    def previous_values(
        self,
        *,
        matrix_type: MatrixType,
        before_ts: int,
        coins: Sequence[str],
        session_key: SessionKey,
    ) -> Mapping[tuple[str, str], float]:
        self.batch_calls += 1
        self.sessions.append(session_key)
        if matrix_type is MatrixType.BENCHMARK:
            return {("BTC", "USDT"): 80.0, ("ETH", "USDT"): 50.0}
        return {}

    def latest_opening(self, *, coins: Sequence[str], session_key: SessionKey) -> StampedRows:
        return StampedRows(
            ts=1_000,
            rows=(MatrixValueRow(base="BTC", quote="USDT", value=90.0),),
        )

    def latest_snapshot_stamp(self) -> int | None:
        return 2_500

    def nearest_ts_at_or_before(self, *, matrix_type: MatrixType, ts: int, **_: Any) -> int:
        return ts - 500

    def latest_trade_stamp(self, *, convention: TradeStampConvention, **_: Any) -> int:
        return 3_000

    def values_at(self, *, matrix_type: MatrixType, ts: int, **_: Any) -> tuple[MatrixValueRow, ...]:  # noqa: E501
        value = 120.0 if ts == 2_000 else 125.0
        return (MatrixValueRow(base="BTC", quote="USDT", value=value),)


def _use_case(store: _FakeMatricesStore, **kwargs: Any) -> BuildLatestMatricesUseCase:
    return BuildLatestMatricesUseCase(
        live_builder=LiveGridBuilder(reader=_FakeTickerReader(), clock=_FixedClock()),
        point_reader=store,
        opening=OpeningGridResolver(
            reader=store,
            cache=InMemoryOpeningTimestampCache(),
            clock=_FixedClock(),
        ),
        snapshot=SnapshotGridResolver(reader=store),
        trade=TradeGridResolver.trade(store),
        **kwargs,
    )


def test_execute_builds_deterministic_payload() -> None:
    """
    Verify payload shape, matrix timestamps and one derived value end-to-end.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Fake store serves opening at 1000, snapshot commit at 2000 and trade commit at 2500.
    Raises:
        AssertionError: If payload contract changes.
    Side Effects:
        None.
    """
    payload = _use_case(_FakeMatricesStore()).execute(
        coins=["btc", "eth"],
        app_session_id="s1",
        window="1H",
    ).to_payload()

    assert payload["ok"] is True
    assert payload["coins"] == ["BTC", "ETH"]
    assert payload["quote"] == "USDT"
    assert payload["window"] == "1h"
    assert payload["ts"] == _NOW_MS
    assert "BTCUSDT" in payload["symbols"]
    assert "USDTBTC" in payload["symbols"]
    assert list(payload["matrices"]) == [
        "benchmark",
        "pct24h",
        "id_pct",
        "pct_drv",
        "pct_ref",
        "ref",
        "delta",
        "pct_snap",
        "snap",
        "pct_traded",
        "traded",
    ]
    matrices = payload["matrices"]
    assert matrices["benchmark"]["values"]["BTC"]["ETH"] == pytest.approx(2.0)
    assert "BTC" not in matrices["benchmark"]["values"]["BTC"]
    assert matrices["id_pct"]["values"]["BTC"]["USDT"] == pytest.approx(0.25)
    assert matrices["id_pct"]["values"]["ETH"]["USDT"] == pytest.approx(0.0)
    assert matrices["pct_ref"]["values"]["BTC"]["USDT"] == pytest.approx(-10.0 / 90.0)
    assert matrices["pct_snap"]["ts"] == 2_000
    assert matrices["pct_snap"]["values"]["BTC"]["USDT"] == pytest.approx(20.0 / 120.0)
    assert matrices["traded"]["ts"] == 2_500
    assert matrices["id_pct"]["ts"] == _NOW_MS
    assert payload["meta"] == {
        "opening_ts": 1_000,
        "snapshot_ts": 2_000,
        "trade_ts": 2_500,
        "universe": ["BTC", "ETH", "USDT"],
    }


def test_execute_prefetches_previous_values_within_session() -> None:
    store = _FakeMatricesStore()

    _use_case(store).execute(coins=["BTC", "ETH"], app_session_id="s1")

    assert store.batch_calls == 2
    assert set(store.sessions) == {SessionKey("s1")}


def test_execute_without_prefetch_uses_point_reads() -> None:
    store = _FakeMatricesStore()

    _use_case(store, prefetch_previous=False).execute(coins=["BTC"])

    assert store.batch_calls == 0
    assert store.sessions
    assert set(store.sessions) == {SessionKey()}


def test_execute_rejects_empty_coin_list() -> None:
    with pytest.raises(CryptoMatrixError) as exc_info:
        _use_case(_FakeMatricesStore()).execute(coins=[" ", ""])

    assert exc_info.value.code == "matrix_universe_empty"
    assert exc_info.value.usage_error is True
    assert exc_info.value.details == {"requested": [" ", ""]}


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(None, "30m"), ("15M", "15m"), (" 1h ", "1h"), ("4h", "30m"), ("", "30m")],
)
def test_normalize_window_falls_back_to_default(raw: str | None, expected: str) -> None:
    assert _use_case(_FakeMatricesStore()).normalize_window(raw) == expected


def test_use_case_rejects_default_window_outside_allowed_list() -> None:
    with pytest.raises(ValueError):
        _use_case(_FakeMatricesStore(), default_window="4h")
