from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence

from cryptomatrix.contexts.matrices.application.ports.stores import MatrixPointReader
from cryptomatrix.contexts.matrices.application.services.opening_grid_resolver import (
    OpeningGridResolver,
)
from cryptomatrix.contexts.matrices.application.services.snapshot_grid_resolver import (
    SnapshotGridResolver,
)
from cryptomatrix.contexts.matrices.application.services.trade_grid_resolver import (
    TradeGridResolver,
)
from cryptomatrix.contexts.matrices.domain.entities import (
    AnchorGrid,
    CoinUniverse,
    MatrixType,
    SessionKey,
)

log = logging.getLogger(__name__)

PrevValueLookup = Callable[[MatrixType, str, str, int], float | None]
AnchorGridFetcher = Callable[[CoinUniverse, int], AnchorGrid]

_PREFETCHED_TYPES = (MatrixType.BENCHMARK, MatrixType.ID_PCT)


@dataclass(frozen=True, slots=True)
class MatrixProviders:
    """
    MatrixProviders — data access callables consumed by the derivation engine.

    `get_prev(matrix_type, base, quote, before_ts)` returns the latest persisted value strictly
    before `before_ts`. Anchor fetchers take `(coins, now_ts)`; snapshot and trade fetchers are
    optional and their grids count as "no data" when absent.

    Related:
      - src/cryptomatrix/contexts/matrices/application/services/derivation_engine.py
      - src/cryptomatrix/contexts/matrices/application/services/opening_grid_resolver.py
    """

    get_prev: PrevValueLookup
    fetch_opening_grid: AnchorGridFetcher
    fetch_snapshot_grid: AnchorGridFetcher | None = None
    fetch_trade_grid: AnchorGridFetcher | None = None

    def __post_init__(self) -> None:
        if not callable(self.get_prev):
            raise ValueError("MatrixProviders requires callable get_prev")
        if not callable(self.fetch_opening_grid):
            raise ValueError("MatrixProviders requires callable fetch_opening_grid")
        if self.fetch_snapshot_grid is not None and not callable(self.fetch_snapshot_grid):
            raise ValueError("MatrixProviders.fetch_snapshot_grid must be callable when provided")
        if self.fetch_trade_grid is not None and not callable(self.fetch_trade_grid):
            raise ValueError("MatrixProviders.fetch_trade_grid must be callable when provided")


class PrefetchingPrevValueLookup:
    """
    `get_prev` implementation that loads a whole universe of previous values per query.

    For `benchmark` and `id_pct` the first lookup at a given `before_ts` reads every pair of
    the universe with one query; pairs missing from that batch fall back to a point lookup.
    Other matrix types always use point lookups.
    """

    def __init__(
        self,
        reader: MatrixPointReader,
        *,
        coins: Sequence[str],
        session_key: SessionKey,
    ) -> None:
        if reader is None:  # type: ignore[truthy-bool]
            raise ValueError("PrefetchingPrevValueLookup requires reader")
        self._reader = reader
        self._coins = tuple(str(coin).strip().upper() for coin in coins)
        self._session_key = session_key
        self._batches: dict[tuple[MatrixType, int], Mapping[tuple[str, str], float]] = {}

    def __call__(
        self,
        matrix_type: MatrixType,
        base: str,
        quote: str,
        before_ts: int,
    ) -> float | None:
        base_key = base.strip().upper()
        quote_key = quote.strip().upper()
        if matrix_type in _PREFETCHED_TYPES and self._coins:
            batch = self._batch(matrix_type, before_ts)
            value = batch.get((base_key, quote_key))
            if value is not None:
                return value
        return self._reader.previous_value(
            matrix_type=matrix_type,
            base=base_key,
            quote=quote_key,
            before_ts=before_ts,
            session_key=self._session_key,
        )

    def _batch(
        self,
        matrix_type: MatrixType,
        before_ts: int,
    ) -> Mapping[tuple[str, str], float]:
        key = (matrix_type, before_ts)
        batch = self._batches.get(key)
        if batch is None:
            batch = self._reader.previous_values(
                matrix_type=matrix_type,
                before_ts=before_ts,
                coins=self._coins,
                session_key=self._session_key,
            )
            self._batches[key] = batch
            log.debug(
                "prefetched %d previous %s values before ts=%s",
                len(batch),
                matrix_type.value,
                before_ts,
            )
        return batch


class PointPrevValueLookup:
    """`get_prev` implementation issuing one point lookup per call."""

    def __init__(self, reader: MatrixPointReader, *, session_key: SessionKey) -> None:
        if reader is None:  # type: ignore[truthy-bool]
            raise ValueError("PointPrevValueLookup requires reader")
        self._reader = reader
        self._session_key = session_key

    def __call__(
        self,
        matrix_type: MatrixType,
        base: str,
        quote: str,
        before_ts: int,
    ) -> float | None:
        return self._reader.previous_value(
            matrix_type=matrix_type,
            base=base.strip().upper(),
            quote=quote.strip().upper(),
            before_ts=before_ts,
            session_key=self._session_key,
        )


def build_matrix_providers(
    *,
    point_reader: MatrixPointReader,
    opening: OpeningGridResolver,
    snapshot: SnapshotGridResolver | None = None,
    trade: TradeGridResolver | None = None,
    app_session_id: str | None = None,
    window: str | None = None,
    prefetch_coins: Sequence[str] | None = None,
) -> MatrixProviders:
    """
    Bind resolvers and the point reader to one session scope.

    Args:
        point_reader: Previous-value store.
        opening: Opening anchor resolver.
        snapshot: Optional snapshot anchor resolver.
        trade: Optional trade anchor resolver (either convention).
        app_session_id: Session scope for every lookup.
        window: Window label forwarded to the opening resolver.
        prefetch_coins: Universe to batch previous-value reads for; `None` disables batching.
    Returns:
        MatrixProviders: Providers ready for `MatrixDerivationEngine`.
    Assumptions:
        Returned providers are used for a single request/universe when prefetching is enabled.
    Raises:
        ValueError: If mandatory collaborators are missing.
    Side Effects:
        None.
    """
    if point_reader is None:  # type: ignore[truthy-bool]
        raise ValueError("build_matrix_providers requires point_reader")
    if opening is None:  # type: ignore[truthy-bool]
        raise ValueError("build_matrix_providers requires opening resolver")

    session_key = SessionKey.from_raw(app_session_id)

    get_prev: PrevValueLookup
    if prefetch_coins is not None:
        get_prev = PrefetchingPrevValueLookup(
            point_reader,
            coins=prefetch_coins,
            session_key=session_key,
        )
    else:
        get_prev = PointPrevValueLookup(point_reader, session_key=session_key)

    return MatrixProviders(
        get_prev=get_prev,
        fetch_opening_grid=_anchor_fetcher(
            opening.fetch,
            app_session_id=session_key.value,
            window=window,
        ),
        fetch_snapshot_grid=(
            None
            if snapshot is None
            else _anchor_fetcher(snapshot.fetch, app_session_id=session_key.value)
        ),
        fetch_trade_grid=(
            None
            if trade is None
            else _anchor_fetcher(trade.fetch, app_session_id=session_key.value)
        ),
    )


def _anchor_fetcher(fetch: Callable[..., AnchorGrid], **options: Any) -> AnchorGridFetcher:
    # resolvers do not depend on now_ts; anchors are "latest as of query time"
    def fetch_anchor(coins: CoinUniverse, now_ts: int) -> AnchorGrid:
        return fetch(coins, **options)

    return fetch_anchor
