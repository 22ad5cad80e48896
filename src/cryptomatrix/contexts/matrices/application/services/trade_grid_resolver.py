from __future__ import annotations

import logging
from dataclasses import dataclass

from cryptomatrix.contexts.matrices.application.ports.stores import MatrixAnchorReader
from cryptomatrix.contexts.matrices.domain.entities import (
    AnchorGrid,
    CoinUniverse,
    Grid,
    MatrixValueRow,
    SessionKey,
    TradeStampConvention,
)
from cryptomatrix.contexts.matrices.domain.services import rows_to_grid

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TradeGridResolver:
    """
    Resolve the benchmark grid recorded at the latest trade stamp of a session.

    One implementation serves both persistence conventions; use `trade()` for
    `benchmark_trade` rows and `traded()` for trade-flagged `benchmark` rows.

    Related:
      - src/cryptomatrix/contexts/matrices/domain/entities/matrix_type.py
      - src/cryptomatrix/contexts/matrices/application/ports/stores/matrix_anchor_reader.py
      - src/cryptomatrix/contexts/matrices/application/services/matrix_providers.py
    """

    reader: MatrixAnchorReader
    convention: TradeStampConvention = TradeStampConvention.BENCHMARK_TRADE

    def __post_init__(self) -> None:
        if self.reader is None:  # type: ignore[truthy-bool]
            raise ValueError("TradeGridResolver requires reader")
        if not isinstance(self.convention, TradeStampConvention):
            raise ValueError(f"TradeGridResolver requires TradeStampConvention, got {self.convention!r}")  # noqa: E501

    @classmethod
    def trade(cls, reader: MatrixAnchorReader) -> TradeGridResolver:
        """Resolver over `benchmark_trade` rows stamped by `trade_ts`."""
        return cls(reader=reader, convention=TradeStampConvention.BENCHMARK_TRADE)

    @classmethod
    def traded(cls, reader: MatrixAnchorReader) -> TradeGridResolver:
        """Resolver over `benchmark` rows flagged `trade_stamp` at their own `ts_ms`."""
        return cls(reader=reader, convention=TradeStampConvention.BENCHMARK_FLAG)

    def fetch(self, coins: CoinUniverse, *, app_session_id: str | None = None) -> AnchorGrid:
        """
        Return trade anchor grid for the session.

        Args:
            coins: Coin universe defining grid order.
            app_session_id: Session scope, `None`/blank means `"global"`.
        Returns:
            AnchorGrid: `ts=None` when the session has no trade stamp (or, for
            `benchmark_trade`, no commit at-or-before it); `(ts, empty grid)` when the
            commit has no rows for these coins.
        Assumptions:
            Storage failures mean "no anchor" for this call.
        Raises:
            None.
        Side Effects:
            Executes up to three storage reads.
        """
        session_key = SessionKey.from_raw(app_session_id)
        missing = AnchorGrid.missing(coins.size)
        try:
            stamp = self.reader.latest_trade_stamp(
                convention=self.convention,
                session_key=session_key,
            )
            if stamp is None:
                return missing
            resolved = self._rows_for_stamp(stamp, coins, session_key)
        except Exception:  # noqa: BLE001
            log.warning(
                "trade anchor lookup failed for session=%s convention=%s",
                session_key,
                self.convention.value,
                exc_info=True,
            )
            return missing

        if resolved is None:
            return missing
        ts, rows = resolved
        if not rows:
            return AnchorGrid(ts=ts, grid=Grid.empty(coins.size))
        return AnchorGrid(ts=ts, grid=rows_to_grid(coins, rows))

    def _rows_for_stamp(
        self,
        stamp: int,
        coins: CoinUniverse,
        session_key: SessionKey,
    ) -> tuple[int, tuple[MatrixValueRow, ...]] | None:
        matrix_type = self.convention.matrix_type
        if self.convention is TradeStampConvention.BENCHMARK_FLAG:
            rows = self.reader.values_at(
                matrix_type=matrix_type,
                ts=stamp,
                coins=coins.coins,
                session_key=session_key,
                trade_stamped_only=True,
            )
            return stamp, rows

        ts = self.reader.nearest_ts_at_or_before(
            matrix_type=matrix_type,
            ts=stamp,
            session_key=session_key,
        )
        if ts is None:
            return None
        rows = self.reader.values_at(
            matrix_type=matrix_type,
            ts=ts,
            coins=coins.coins,
            session_key=session_key,
        )
        return ts, rows
