from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Sequence

from cryptomatrix.contexts.matrices.adapters.outbound.persistence.postgres.gateway import (
    MatricesPostgresGateway,
)
from cryptomatrix.contexts.matrices.application.dto import StampedRows
from cryptomatrix.contexts.matrices.application.ports.stores import (
    MatrixAnchorReader,
    MatrixPointReader,
)
from cryptomatrix.contexts.matrices.domain.entities import (
    MatrixType,
    MatrixValueRow,
    SessionKey,
    TradeStampConvention,
)

log = logging.getLogger(__name__)

_SESSION_FILTER = "COALESCE(meta->>'app_session_id', 'global') = %(session_key)s"
_TRADE_STAMP_EXPRESSIONS = {
    TradeStampConvention.BENCHMARK_TRADE: "(MAX(EXTRACT(EPOCH FROM trade_ts)) * 1000)::bigint",
    TradeStampConvention.BENCHMARK_FLAG: "MAX(ts_ms)",
}


class PostgresMatrixSeriesReader(MatrixPointReader, MatrixAnchorReader):
    """
    PostgresMatrixSeriesReader — explicit SQL adapter over the persisted matrix time series.

    Reads `(ts_ms, matrix_type, base, quote, value, meta, opening_stamp, opening_ts,
    trade_stamp, trade_ts)` rows; session scope is `meta->>'app_session_id'` with
    `'global'` for rows without it.

    Related:
      - src/cryptomatrix/contexts/matrices/application/ports/stores/matrix_point_reader.py
      - src/cryptomatrix/contexts/matrices/application/ports/stores/matrix_anchor_reader.py
      - src/cryptomatrix/contexts/matrices/adapters/outbound/persistence/postgres/gateway.py
    """

    def __init__(
        self,
        *,
        gateway: MatricesPostgresGateway,
        values_table: str = "matrices.dyn_values",
        snapshot_registry_table: str = "snapshot.snapshot_registry",
    ) -> None:
        """
        Initialize reader with SQL gateway and target table names.

        Args:
            gateway: SQL gateway abstraction.
            values_table: Matrix values table name.
            snapshot_registry_table: Snapshot registry table name.
        Returns:
            None.
        Assumptions:
            Table names come from trusted runtime config, never from request input.
        Raises:
            ValueError: If dependencies are invalid.
        Side Effects:
            None.
        """
        if gateway is None:  # type: ignore[truthy-bool]
            raise ValueError("PostgresMatrixSeriesReader requires gateway")
        normalized_values_table = values_table.strip()
        if not normalized_values_table:
            raise ValueError("PostgresMatrixSeriesReader requires non-empty values_table")
        normalized_registry_table = snapshot_registry_table.strip()
        if not normalized_registry_table:
            raise ValueError(
                "PostgresMatrixSeriesReader requires non-empty snapshot_registry_table"
            )
        self._gateway = gateway
        self._values_table = normalized_values_table
        self._registry_table = normalized_registry_table

    def previous_value(
        self,
        *,
        matrix_type: MatrixType,
        base: str,
        quote: str,
        before_ts: int,
        session_key: SessionKey,
    ) -> float | None:
        query = f"""
        SELECT value
        FROM {self._values_table}
        WHERE matrix_type = %(matrix_type)s
          AND base = %(base)s
          AND quote = %(quote)s
          AND ts_ms < %(before_ts)s
          AND {_SESSION_FILTER}
        ORDER BY ts_ms DESC
        LIMIT 1
        """
        row = self._gateway.fetch_one(
            query=query,
            parameters={
                "matrix_type": matrix_type.value,
                "base": base.strip().upper(),
                "quote": quote.strip().upper(),
                "before_ts": int(before_ts),
                "session_key": session_key.value,
            },
        )
        if row is None:
            return None
        return _finite_float(row.get("value"))

    def previous_values(
        self,
        *,
        matrix_type: MatrixType,
        before_ts: int,
        coins: Sequence[str],
        session_key: SessionKey,
    ) -> Mapping[tuple[str, str], float]:
        """
        Return latest value strictly before `before_ts` for every pair of the universe.

        Args:
            matrix_type: Persisted matrix kind.
            before_ts: Exclusive upper bound in epoch milliseconds.
            coins: Universe filtering both base and quote.
            session_key: Session scope.
        Returns:
            Mapping[tuple[str, str], float]: Finite values keyed by `(base, quote)`.
        Assumptions:
            `DISTINCT ON (base, quote)` with `ts_ms DESC` picks the latest row per pair.
        Raises:
            Exception: Propagates gateway errors.
        Side Effects:
            Executes one SQL select statement.
        """
        normalized_coins = _normalize_coins(coins)
        if not normalized_coins:
            return {}
        query = f"""
        SELECT DISTINCT ON (base, quote) base, quote, value
        FROM {self._values_table}
        WHERE matrix_type = %(matrix_type)s
          AND ts_ms < %(before_ts)s
          AND base = ANY(%(coins)s)
          AND quote = ANY(%(coins)s)
          AND {_SESSION_FILTER}
        ORDER BY base, quote, ts_ms DESC
        """
        rows = self._gateway.fetch_all(
            query=query,
            parameters={
                "matrix_type": matrix_type.value,
                "before_ts": int(before_ts),
                "coins": normalized_coins,
                "session_key": session_key.value,
            },
        )
        values: dict[tuple[str, str], float] = {}
        for row in rows:
            value = _finite_float(row.get("value"))
            if value is None:
                continue
            key = (str(row["base"]).strip().upper(), str(row["quote"]).strip().upper())
            values[key] = value
        return values

    def latest_opening(
        self,
        *,
        coins: Sequence[str],
        session_key: SessionKey,
    ) -> StampedRows | None:
        """
        Return rows of the latest opening-stamped benchmark commit of a session.

        Args:
            coins: Universe filtering both base and quote.
            session_key: Session scope.
        Returns:
            StampedRows | None: Effective opening timestamp (`opening_ts` column, else
            `ts_ms`) with rows, or `None` when nothing matches.
        Assumptions:
            Latest opening is ordered by effective opening time, then by `ts_ms`.
        Raises:
            Exception: Propagates gateway errors.
        Side Effects:
            Executes one SQL select statement.
        """
        normalized_coins = _normalize_coins(coins)
        if not normalized_coins:
            return None
        query = f"""
        WITH latest AS (
            SELECT
                ts_ms,
                COALESCE(opening_ts, to_timestamp(ts_ms / 1000.0)) AS ots
            FROM {self._values_table}
            WHERE matrix_type = %(matrix_type)s
              AND opening_stamp = TRUE
              AND {_SESSION_FILTER}
            ORDER BY ots DESC NULLS LAST, ts_ms DESC
            LIMIT 1
        )
        SELECT
            dv.base,
            dv.quote,
            dv.value,
            l.ts_ms,
            (EXTRACT(EPOCH FROM l.ots) * 1000)::bigint AS opening_ts_ms
        FROM {self._values_table} dv
        JOIN latest l ON l.ts_ms = dv.ts_ms
        WHERE dv.matrix_type = %(matrix_type)s
          AND dv.base = ANY(%(coins)s)
          AND dv.quote = ANY(%(coins)s)
          AND COALESCE(dv.meta->>'app_session_id', 'global') = %(session_key)s
        """
        rows = self._gateway.fetch_all(
            query=query,
            parameters={
                "matrix_type": MatrixType.BENCHMARK.value,
                "coins": normalized_coins,
                "session_key": session_key.value,
            },
        )
        if not rows:
            return None
        first = rows[0]
        ts = _optional_int(first.get("opening_ts_ms"))
        if ts is None:
            ts = int(first["ts_ms"])
        return StampedRows(ts=ts, rows=tuple(_value_row(row) for row in rows))

    def latest_snapshot_stamp(self) -> int | None:
        # snapshot_stamp is timestamptz
        query = f"""
        SELECT (EXTRACT(EPOCH FROM snapshot_stamp) * 1000)::bigint AS snapshot_stamp_ms
        FROM {self._registry_table}
        WHERE snapshot_stamp IS NOT NULL
        ORDER BY snapshot_stamp DESC
        LIMIT 1
        """
        row = self._gateway.fetch_one(query=query, parameters={})
        if row is None:
            return None
        return _optional_int(row.get("snapshot_stamp_ms"))

    def nearest_ts_at_or_before(
        self,
        *,
        matrix_type: MatrixType,
        ts: int,
        session_key: SessionKey,
    ) -> int | None:
        query = f"""
        SELECT ts_ms
        FROM {self._values_table}
        WHERE matrix_type = %(matrix_type)s
          AND ts_ms <= %(ts)s
          AND {_SESSION_FILTER}
        ORDER BY ts_ms DESC
        LIMIT 1
        """
        row = self._gateway.fetch_one(
            query=query,
            parameters={
                "matrix_type": matrix_type.value,
                "ts": int(ts),
                "session_key": session_key.value,
            },
        )
        if row is None:
            return None
        return _optional_int(row.get("ts_ms"))

    def latest_trade_stamp(
        self,
        *,
        convention: TradeStampConvention,
        session_key: SessionKey,
    ) -> int | None:
        """
        Return the latest trade stamp of a session under one persistence convention.

        Args:
            convention: `benchmark_trade` rows stamped by `trade_ts`, or trade-flagged
                `benchmark` rows stamped by `ts_ms`.
            session_key: Session scope.
        Returns:
            int | None: Epoch milliseconds or `None` when the session has no trade stamp.
        Assumptions:
            Aggregate query always returns one row; `NULL` means "no stamp".
        Raises:
            Exception: Propagates gateway errors.
        Side Effects:
            Executes one SQL select statement.
        """
        query = f"""
        SELECT {_TRADE_STAMP_EXPRESSIONS[convention]} AS ts_ms
        FROM {self._values_table}
        WHERE matrix_type = %(matrix_type)s
          AND trade_stamp = TRUE
          AND {_SESSION_FILTER}
        """
        row = self._gateway.fetch_one(
            query=query,
            parameters={
                "matrix_type": convention.matrix_type.value,
                "session_key": session_key.value,
            },
        )
        if row is None:
            return None
        return _optional_int(row.get("ts_ms"))

    def values_at(
        self,
        *,
        matrix_type: MatrixType,
        ts: int,
        coins: Sequence[str],
        session_key: SessionKey,
        trade_stamped_only: bool = False,
    ) -> tuple[MatrixValueRow, ...]:
        normalized_coins = _normalize_coins(coins)
        if not normalized_coins:
            return ()
        trade_filter = "AND trade_stamp = TRUE" if trade_stamped_only else ""
        query = f"""
        SELECT base, quote, value
        FROM {self._values_table}
        WHERE matrix_type = %(matrix_type)s
          AND ts_ms = %(ts)s
          AND base = ANY(%(coins)s)
          AND quote = ANY(%(coins)s)
          AND {_SESSION_FILTER}
          {trade_filter}
        ORDER BY base, quote
        """
        rows = self._gateway.fetch_all(
            query=query,
            parameters={
                "matrix_type": matrix_type.value,
                "ts": int(ts),
                "coins": normalized_coins,
                "session_key": session_key.value,
            },
        )
        log.debug(
            "loaded %d %s rows at ts=%s for session=%s",
            len(rows),
            matrix_type.value,
            ts,
            session_key,
        )
        return tuple(_value_row(row) for row in rows)


def _normalize_coins(coins: Sequence[str]) -> list[str]:
    out: list[str] = []
    for coin in coins:
        normalized = str(coin or "").strip().upper()
        if normalized and normalized not in out:
            out.append(normalized)
    return out


def _value_row(row: Mapping[str, Any]) -> MatrixValueRow:
    return MatrixValueRow(
        base=str(row["base"]),
        quote=str(row["quote"]),
        value=_finite_float(row.get("value")),
    )


def _finite_float(raw: Any) -> float | None:
    if raw is None:
        return None
    value = float(raw)
    return value if math.isfinite(value) else None


def _optional_int(raw: Any) -> int | None:
    if raw is None:
        return None
    return int(raw)
