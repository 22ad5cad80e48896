from __future__ import annotations

import logging
from dataclasses import dataclass

from cryptomatrix.contexts.matrices.application.ports.stores import MatrixAnchorReader
from cryptomatrix.contexts.matrices.domain.entities import (
    AnchorGrid,
    CoinUniverse,
    Grid,
    MatrixType,
    SessionKey,
)
from cryptomatrix.contexts.matrices.domain.services import rows_to_grid

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SnapshotGridResolver:
    """
    Resolve the benchmark grid aligned to the latest snapshot registry stamp.

    Related:
      - src/cryptomatrix/contexts/matrices/application/ports/stores/matrix_anchor_reader.py
      - src/cryptomatrix/contexts/matrices/application/services/matrix_providers.py
    """

    reader: MatrixAnchorReader

    def __post_init__(self) -> None:
        if self.reader is None:  # type: ignore[truthy-bool]
            raise ValueError("SnapshotGridResolver requires reader")

    def fetch(self, coins: CoinUniverse, *, app_session_id: str | None = None) -> AnchorGrid:
        """
        Return snapshot anchor grid for the session.

        Args:
            coins: Coin universe defining grid order.
            app_session_id: Session scope, `None`/blank means `"global"`.
        Returns:
            AnchorGrid: `ts=None` when there is no registry stamp or no benchmark commit
            at-or-before it; `(ts, empty grid)` when the commit has no rows for these coins.
        Assumptions:
            Registry stamp is global; translation to a commit timestamp is session-scoped.
        Raises:
            None.
        Side Effects:
            Executes up to three storage reads.
        """
        session_key = SessionKey.from_raw(app_session_id)
        missing = AnchorGrid.missing(coins.size)
        try:
            stamp = self.reader.latest_snapshot_stamp()
            if stamp is None:
                return missing
            ts = self.reader.nearest_ts_at_or_before(
                matrix_type=MatrixType.BENCHMARK,
                ts=stamp,
                session_key=session_key,
            )
            if ts is None:
                return missing
            rows = self.reader.values_at(
                matrix_type=MatrixType.BENCHMARK,
                ts=ts,
                coins=coins.coins,
                session_key=session_key,
            )
        except Exception:  # noqa: BLE001
            log.warning("snapshot anchor lookup failed for session=%s", session_key, exc_info=True)
            return missing

        if not rows:
            return AnchorGrid(ts=ts, grid=Grid.empty(coins.size))
        return AnchorGrid(ts=ts, grid=rows_to_grid(coins, rows))
