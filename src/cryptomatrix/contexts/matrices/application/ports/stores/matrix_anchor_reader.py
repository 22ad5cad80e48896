from __future__ import annotations

from typing import Protocol, Sequence

from cryptomatrix.contexts.matrices.application.dto.stamped_rows import StampedRows
from cryptomatrix.contexts.matrices.domain.entities import (
    MatrixType,
    MatrixValueRow,
    SessionKey,
    TradeStampConvention,
)


class MatrixAnchorReader(Protocol):
    """
    Read contract for stamped matrix rows used by the opening/snapshot/trade anchor resolvers.

    Related:
      - src/cryptomatrix/contexts/matrices/application/services/opening_grid_resolver.py
      - src/cryptomatrix/contexts/matrices/application/services/snapshot_grid_resolver.py
      - src/cryptomatrix/contexts/matrices/application/services/trade_grid_resolver.py
      - src/cryptomatrix/contexts/matrices/adapters/outbound/persistence/postgres/
        matrix_series_reader.py
    """

    def latest_opening(
        self,
        *,
        coins: Sequence[str],
        session_key: SessionKey,
    ) -> StampedRows | None:
        """
        Return rows of the latest opening-stamped benchmark commit of a session.

        Parameters:
        - coins: upper-cased universe used to filter base and quote.
        - session_key: session scope of persisted rows.

        Returns:
        - Stamp with its effective opening timestamp and rows, or `None` when no opening
          stamp exists (or it has no rows for these coins).

        Assumptions/Invariants:
        - Effective timestamp is the explicit opening time when recorded, else the row `ts_ms`.

        Errors/Exceptions:
        - Propagates storage-specific reader errors.

        Side effects:
        - May execute one storage read query.
        """
        ...

    def latest_snapshot_stamp(self) -> int | None:
        """
        Return latest global snapshot registry stamp in epoch ms, or `None` if none exists.

        Parameters:
        - None.

        Returns:
        - Epoch milliseconds or `None`.

        Assumptions/Invariants:
        - Registry is independent of coin universe and session.

        Errors/Exceptions:
        - Propagates storage-specific reader errors.

        Side effects:
        - May execute one storage read query.
        """
        ...

    def nearest_ts_at_or_before(
        self,
        *,
        matrix_type: MatrixType,
        ts: int,
        session_key: SessionKey,
    ) -> int | None:
        """
        Return the latest persisted matrix timestamp `<= ts` for a session, or `None`.

        Parameters:
        - matrix_type: persisted matrix kind.
        - ts: inclusive upper bound in epoch ms.
        - session_key: session scope of persisted rows.

        Returns:
        - Epoch milliseconds or `None`.

        Assumptions/Invariants:
        - None.

        Errors/Exceptions:
        - Propagates storage-specific reader errors.

        Side effects:
        - May execute one storage read query.
        """
        ...

    def latest_trade_stamp(
        self,
        *,
        convention: TradeStampConvention,
        session_key: SessionKey,
    ) -> int | None:
        """
        Return the latest trade stamp time of a session under one marking convention.

        Parameters:
        - convention: which matrix kind and stamp column are authoritative.
        - session_key: session scope of persisted rows.

        Returns:
        - Epoch milliseconds or `None` when the session has no trade stamp.

        Assumptions/Invariants:
        - None.

        Errors/Exceptions:
        - Propagates storage-specific reader errors.

        Side effects:
        - May execute one storage read query.
        """
        ...

    def values_at(
        self,
        *,
        matrix_type: MatrixType,
        ts: int,
        coins: Sequence[str],
        session_key: SessionKey,
        trade_stamped_only: bool = False,
    ) -> tuple[MatrixValueRow, ...]:
        """
        Return pairwise rows recorded at exactly one matrix timestamp.

        Parameters:
        - matrix_type: persisted matrix kind.
        - ts: exact timestamp in epoch ms.
        - coins: upper-cased universe used to filter base and quote.
        - session_key: session scope of persisted rows.
        - trade_stamped_only: restrict to rows flagged `trade_stamp`.

        Returns:
        - Rows in storage order (possibly empty).

        Assumptions/Invariants:
        - None.

        Errors/Exceptions:
        - Propagates storage-specific reader errors.

        Side effects:
        - May execute one storage read query.
        """
        ...
