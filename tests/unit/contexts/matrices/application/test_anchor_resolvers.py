from __future__ import annotations

from typing import Any, Mapping, Sequence

import pytest

from cryptomatrix.contexts.matrices.adapters.outbound.cache import InMemoryOpeningTimestampCache
from cryptomatrix.contexts.matrices.application.dto import StampedRows
from cryptomatrix.contexts.matrices.application.services import (
    OpeningGridResolver,
    SnapshotGridResolver,
    TradeGridResolver,
    opening_cache_key,
)
from cryptomatrix.contexts.matrices.domain.entities import (
    CoinUniverse,
    MatrixType,
    MatrixValueRow,
    SessionKey,
    TradeStampConvention,
)
from cryptomatrix.platform.time.system_clock import SystemClock
from cryptomatrix.shared_kernel.primitives import UtcTimestamp


class _FixedClock:
    def __init__(self, epoch_ms: int) -> None:
        self._now = UtcTimestamp.from_epoch_ms(epoch_ms)

    def now(self) -> UtcTimestamp:
        return self._now


class _FakeAnchorReader:
    """
    Deterministic in-memory anchor reader recording every call.

    Related:
      - src/cryptomatrix/contexts/matrices/application/ports/stores/matrix_anchor_reader.py
    """

    def __init__(
        self,
        *,
        opening: StampedRows | None = None,
        snapshot_stamp: int | None = None,
        nearest: Mapping[MatrixType, int] | None = None,
        trade_stamps: Mapping[TradeStampConvention, int] | None = None,
        rows: Mapping[tuple[MatrixType, int], tuple[MatrixValueRow, ...]] | None = None,
        error: Exception | None = None,
    ) -> None:
        self._opening = opening
        self._snapshot_stamp = snapshot_stamp
        self._nearest = dict(nearest or {})
        self._trade_stamps = dict(trade_stamps or {})
        self._rows = dict(rows or {})
        self._error = error
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def _record(self, name: str, **kwargs: Any) -> None:
        self.calls.append((name, kwargs))
        if self._error is not None:
            raise self._error

    def latest_opening(self, *, coins: Sequence[str], session_key: SessionKey) -> StampedRows | None:
        self._record("latest_opening", coins=tuple(coins), session_key=session_key)
        return self._opening

    def latest_snapshot_stamp(self) -> int | None:
        self._record("latest_snapshot_stamp")
        return self._snapshot_stamp

    def nearest_ts_at_or_before(
        self,
        *,
        matrix_type: MatrixType,
        ts: int,
        session_key: SessionKey,
    ) -> int | None:
        self._record("nearest_ts_at_or_before", matrix_type=matrix_type, ts=ts, session_key=session_key)  # noqa: E501
        return self._nearest.get(matrix_type)

    def latest_trade_stamp(
        self,
        *,
        convention: TradeStampConvention,
        session_key: SessionKey,
    ) -> int | None:
        self._record("latest_trade_stamp", convention=convention, session_key=session_key)
        return self._trade_stamps.get(convention)

    def values_at(
        self,
        *,
        matrix_type: MatrixType,
        ts: int,
        coins: Sequence[str],
        session_key: SessionKey,
        trade_stamped_only: bool = False,
    ) -> tuple[MatrixValueRow, ...]:
        self._record(
            "values_at",
            matrix_type=matrix_type,
            ts=ts,
            coins=tuple(coins),
            session_key=session_key,
            trade_stamped_only=trade_stamped_only,
        )
        return self._rows.get((matrix_type, ts), ())


def _universe() -> CoinUniverse:
    return CoinUniverse.build(["BTC", "ETH", "USDT"])


def _opening_resolver(
    reader: _FakeAnchorReader,
    *,
    cache: InMemoryOpeningTimestampCache | None = None,
    now_ms: int = 5_000,
) -> OpeningGridResolver:
    return OpeningGridResolver(
        reader=reader,
        cache=cache if cache is not None else InMemoryOpeningTimestampCache(),
        clock=_FixedClock(now_ms),
    )


def test_opening_resolver_maps_persisted_rows_without_reciprocal_inference() -> None:
    """
    Verify opening rows land on exact coordinates only and carry the opening timestamp.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Only `BTC/ETH = 15.0` is persisted at the opening stamp `ts=1000`.
    Raises:
        AssertionError: If reciprocal or pivot cells are populated.
    Side Effects:
        None.
    """
    reader = _FakeAnchorReader(
        opening=StampedRows(
            ts=1000,
            rows=(MatrixValueRow(base="BTC", quote="ETH", value=15.0),),
        ),
    )

    anchor = _opening_resolver(reader).fetch(_universe())

    assert anchor.ts == 1000
    assert anchor.grid.get(0, 1) == 15.0
    assert anchor.grid.get(1, 0) is None
    assert anchor.grid.get(0, 2) is None
    assert reader.calls[0] == (
        "latest_opening",
        {"coins": ("BTC", "ETH", "USDT"), "session_key": SessionKey("global")},
    )


def test_opening_resolver_caches_resolved_ts_per_session_window_pivot() -> None:
    cache = InMemoryOpeningTimestampCache()
    reader = _FakeAnchorReader(
        opening=StampedRows(ts=1000, rows=(MatrixValueRow(base="BTC", quote="ETH", value=1.0),)),
    )

    _opening_resolver(reader, cache=cache).fetch(_universe(), app_session_id="s1", window="30M")

    assert cache.get(opening_cache_key(SessionKey("s1"), "30m", "USDT")) == 1000
    assert cache.get(opening_cache_key(SessionKey("s1"), "1h", "USDT")) is None


def test_opening_resolver_fallback_prefers_override_then_cache_then_clock() -> None:
    cache = InMemoryOpeningTimestampCache()
    resolver = _opening_resolver(_FakeAnchorReader(), cache=cache, now_ms=9_000)

    first = resolver.fetch(_universe())
    assert first.ts == 9_000
    assert first.grid.is_empty() is True

    cache.set(opening_cache_key(SessionKey(), "1h", "USDT"), 4_000)
    assert resolver.fetch(_universe()).ts == 4_000

    overridden = resolver.fetch(_universe(), opening_ts=7_000)
    assert overridden.ts == 7_000
    assert cache.get(opening_cache_key(SessionKey(), "1h", "USDT")) == 7_000


def test_opening_resolver_fallback_ts_is_near_current_time_with_system_clock() -> None:
    resolver = OpeningGridResolver(
        reader=_FakeAnchorReader(),
        cache=InMemoryOpeningTimestampCache(),
        clock=SystemClock(),
    )
    before = SystemClock().now().epoch_ms

    anchor = resolver.fetch(_universe())

    after = SystemClock().now().epoch_ms
    assert anchor.ts is not None
    assert before <= anchor.ts <= after
    assert anchor.grid.is_empty() is True


def test_opening_resolver_degrades_storage_failure_to_empty_grid(
    caplog: pytest.LogCaptureFixture,
) -> None:
    reader = _FakeAnchorReader(error=RuntimeError("db down"))

    with caplog.at_level("WARNING"):
        anchor = _opening_resolver(reader, now_ms=3_000).fetch(_universe())

    assert anchor.ts == 3_000
    assert anchor.grid.is_empty() is True
    assert "opening anchor lookup failed" in caplog.text


def test_opening_resolver_treats_empty_rows_as_not_opened() -> None:
    reader = _FakeAnchorReader(opening=StampedRows(ts=1000, rows=()))

    anchor = _opening_resolver(reader, now_ms=2_000).fetch(_universe())

    assert anchor.ts == 2_000
    assert anchor.grid.is_empty() is True


def test_opening_pair_value_reads_single_cross_rate() -> None:
    reader = _FakeAnchorReader(
        opening=StampedRows(ts=1000, rows=(MatrixValueRow(base="BTC", quote="ETH", value=15.0),)),
    )

    assert _opening_resolver(reader).pair_value(base="btc", quote="eth") == (1000, 15.0)


def test_snapshot_resolver_translates_registry_stamp_to_commit_ts() -> None:
    reader = _FakeAnchorReader(
        snapshot_stamp=2_500,
        nearest={MatrixType.BENCHMARK: 2_000},
        rows={
            (MatrixType.BENCHMARK, 2_000): (
                MatrixValueRow(base="ETH", quote="USDT", value=3000.0),
            ),
        },
    )

    anchor = SnapshotGridResolver(reader=reader).fetch(_universe(), app_session_id="s1")

    assert anchor.ts == 2_000
    assert anchor.grid.get(1, 2) == 3000.0
    assert reader.calls[1] == (
        "nearest_ts_at_or_before",
        {"matrix_type": MatrixType.BENCHMARK, "ts": 2_500, "session_key": SessionKey("s1")},
    )


def test_snapshot_resolver_without_stamp_or_commit_reports_no_anchor() -> None:
    assert SnapshotGridResolver(reader=_FakeAnchorReader()).fetch(_universe()).ts is None

    no_commit = _FakeAnchorReader(snapshot_stamp=2_500)
    assert SnapshotGridResolver(reader=no_commit).fetch(_universe()).ts is None


def test_snapshot_resolver_with_commit_but_no_rows_keeps_ts() -> None:
    reader = _FakeAnchorReader(snapshot_stamp=2_500, nearest={MatrixType.BENCHMARK: 2_000})

    anchor = SnapshotGridResolver(reader=reader).fetch(_universe())

    assert anchor.ts == 2_000
    assert anchor.grid.is_empty() is True


def test_snapshot_resolver_degrades_storage_failure_to_no_anchor() -> None:
    reader = _FakeAnchorReader(error=RuntimeError("db down"))

    anchor = SnapshotGridResolver(reader=reader).fetch(_universe())

    assert anchor.ts is None
    assert anchor.grid.is_empty() is True


def test_trade_resolver_uses_benchmark_trade_rows_at_nearest_commit() -> None:
    reader = _FakeAnchorReader(
        trade_stamps={TradeStampConvention.BENCHMARK_TRADE: 7_500},
        nearest={MatrixType.BENCHMARK_TRADE: 7_000},
        rows={
            (MatrixType.BENCHMARK_TRADE, 7_000): (
                MatrixValueRow(base="BTC", quote="USDT", value=60_000.0),
            ),
        },
    )

    anchor = TradeGridResolver.trade(reader).fetch(_universe())

    assert anchor.ts == 7_000
    assert anchor.grid.get(0, 2) == 60_000.0
    values_call = reader.calls[-1][1]
    assert values_call["matrix_type"] is MatrixType.BENCHMARK_TRADE
    assert values_call["trade_stamped_only"] is False


def test_traded_resolver_reads_flagged_benchmark_rows_at_stamp_ts() -> None:
    reader = _FakeAnchorReader(
        trade_stamps={TradeStampConvention.BENCHMARK_FLAG: 8_000},
        rows={
            (MatrixType.BENCHMARK, 8_000): (
                MatrixValueRow(base="ETH", quote="BTC", value=0.05),
            ),
        },
    )

    anchor = TradeGridResolver.traded(reader).fetch(_universe(), app_session_id="s2")

    assert anchor.ts == 8_000
    assert anchor.grid.get(1, 0) == 0.05
    assert [name for name, _ in reader.calls] == ["latest_trade_stamp", "values_at"]
    values_call = reader.calls[-1][1]
    assert values_call["trade_stamped_only"] is True
    assert values_call["session_key"] == SessionKey("s2")


def test_trade_resolver_without_stamp_reports_no_anchor() -> None:
    anchor = TradeGridResolver.trade(_FakeAnchorReader()).fetch(_universe())

    assert anchor.ts is None
    assert anchor.grid.is_empty() is True


def test_trade_resolver_degrades_storage_failure_to_no_anchor(
    caplog: pytest.LogCaptureFixture,
) -> None:
    reader = _FakeAnchorReader(error=RuntimeError("db down"))

    with caplog.at_level("WARNING"):
        anchor = TradeGridResolver.traded(reader).fetch(_universe())

    assert anchor.ts is None
    assert "trade anchor lookup failed" in caplog.text
