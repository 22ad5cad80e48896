from __future__ import annotations

from typing import Mapping, Protocol, Sequence

from cryptomatrix.contexts.matrices.domain.entities import MatrixType, SessionKey


class MatrixPointReader(Protocol):
    """
    Read contract for "previous value" lookups over the persisted matrix time series.

    Related:
      - src/cryptomatrix/contexts/matrices/application/services/matrix_providers.py
      - src/cryptomatrix/contexts/matrices/adapters/outbound/persistence/postgres/
        matrix_series_reader.py
    """

    def previous_value(
        self,
        *,
        matrix_type: MatrixType,
        base: str,
        quote: str,
        before_ts: int,
        session_key: SessionKey,
    ) -> float | None:
        """
        Return the most recent value of one pair strictly before a reference time.

        Parameters:
        - matrix_type: persisted matrix kind (`benchmark` or `id_pct`).
        - base: upper-cased base coin.
        - quote: upper-cased quote coin.
        - before_ts: exclusive upper bound in epoch milliseconds.
        - session_key: session scope of persisted rows.

        Returns:
        - Latest value with `ts < before_ts`, or `None` when no such row exists.

        Assumptions/Invariants:
        - Only rows of the given session scope are considered.

        Errors/Exceptions:
        - Propagates storage-specific reader errors.

        Side effects:
        - May execute one storage read query.
        """
        ...

    def previous_values(
        self,
        *,
        matrix_type: MatrixType,
        before_ts: int,
        coins: Sequence[str],
        session_key: SessionKey,
    ) -> Mapping[tuple[str, str], float]:
        """
        Return the latest value strictly before `before_ts` for every pair of the universe.

        Parameters:
        - matrix_type: persisted matrix kind.
        - before_ts: exclusive upper bound in epoch milliseconds.
        - coins: upper-cased universe; both base and quote are filtered by it.
        - session_key: session scope of persisted rows.

        Returns:
        - Mapping `(base, quote) -> value`; pairs without history are absent.

        Assumptions/Invariants:
        - Result is equivalent to calling `previous_value` per pair.

        Errors/Exceptions:
        - Propagates storage-specific reader errors.

        Side effects:
        - May execute one storage read query.
        """
        ...
