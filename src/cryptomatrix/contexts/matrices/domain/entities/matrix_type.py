from __future__ import annotations

from enum import Enum


class MatrixType(str, Enum):
    """
    Persisted matrix kinds read by the anchor and point lookups (`matrix_type` column).
    """

    BENCHMARK = "benchmark"
    ID_PCT = "id_pct"
    BENCHMARK_TRADE = "benchmark_trade"


class TradeStampConvention(Enum):
    """
    Two supported "I traded now" marking conventions for trade anchors.

    - BENCHMARK_TRADE: rows of `benchmark_trade` kind flagged `trade_stamp`, stamp time in
      `trade_ts`; the stamp is translated to the nearest committed `ts_ms` at-or-before it.
    - BENCHMARK_FLAG: regular `benchmark` rows flagged `trade_stamp`, stamp time is the row
      `ts_ms` itself; values are read from flagged rows at exactly that `ts_ms`.
    """

    BENCHMARK_TRADE = "benchmark_trade"
    BENCHMARK_FLAG = "benchmark_flag"

    @property
    def matrix_type(self) -> MatrixType:
        if self is TradeStampConvention.BENCHMARK_TRADE:
            return MatrixType.BENCHMARK_TRADE
        return MatrixType.BENCHMARK

