from __future__ import annotations

import logging
from dataclasses import dataclass

from cryptomatrix.contexts.matrices.application.dto.stamped_rows import StampedRows
from cryptomatrix.contexts.matrices.application.ports.cache import OpeningTimestampCache
from cryptomatrix.contexts.matrices.application.ports.clock import Clock
from cryptomatrix.contexts.matrices.application.ports.stores import MatrixAnchorReader
from cryptomatrix.contexts.matrices.domain.entities import (
    DEFAULT_PIVOT,
    AnchorGrid,
    CoinUniverse,
    Grid,
    SessionKey,
)
from cryptomatrix.contexts.matrices.domain.services import rows_to_grid

log = logging.getLogger(__name__)

DEFAULT_OPENING_WINDOW = "1h"


@dataclass(frozen=True, slots=True)
class OpeningGridResolver:
    """
    Resolve the session-opening benchmark grid from opening-stamped persisted rows.

    Related:
      - src/cryptomatrix/contexts/matrices/application/ports/stores/matrix_anchor_reader.py
      - src/cryptomatrix/contexts/matrices/application/ports/cache/opening_ts_cache.py
      - src/cryptomatrix/contexts/matrices/application/services/matrix_providers.py
    """

    reader: MatrixAnchorReader
    cache: OpeningTimestampCache
    clock: Clock
    default_window: str = DEFAULT_OPENING_WINDOW

    def __post_init__(self) -> None:
        """
        Validate mandatory dependencies.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            The cache instance is shared for the lifetime of the composed application.
        Raises:
            ValueError: If one of dependencies is missing or default window is blank.
        Side Effects:
            None.
        """
        if self.reader is None:  # type: ignore[truthy-bool]
            raise ValueError("OpeningGridResolver requires reader")
        if self.cache is None:  # type: ignore[truthy-bool]
            raise ValueError("OpeningGridResolver requires cache")
        if self.clock is None:  # type: ignore[truthy-bool]
            raise ValueError("OpeningGridResolver requires clock")
        if not self.default_window.strip():
            raise ValueError("OpeningGridResolver requires non-empty default_window")

    def fetch(
        self,
        coins: CoinUniverse,
        *,
        app_session_id: str | None = None,
        window: str | None = None,
        opening_ts: int | None = None,
    ) -> AnchorGrid:
        """
        Return opening anchor grid; never returns synthetic values.

        Args:
            coins: Coin universe defining grid order.
            app_session_id: Session scope, `None`/blank means `"global"`.
            window: Window label used in the timestamp cache key (default `1h`).
            opening_ts: Explicit fallback timestamp used when no opening is persisted.
        Returns:
            AnchorGrid: Persisted opening values with their timestamp, or an empty grid whose
            timestamp is `opening_ts`, else the cached timestamp, else the current time.
        Assumptions:
            An empty grid means "not opened yet", distinct from "opened at zero".
        Raises:
            None.
        Side Effects:
            Reads storage once; writes the resolved timestamp into the cache.
        """
        session_key = SessionKey.from_raw(app_session_id)
        window_label = (window or self.default_window).strip().lower() or self.default_window
        cache_key = opening_cache_key(session_key, window_label, coins.pivot)

        stamped = self._load_persisted_opening(coins, session_key)
        if stamped is not None:
            self.cache.set(cache_key, stamped.ts)
            return AnchorGrid(ts=stamped.ts, grid=rows_to_grid(coins, stamped.rows))

        cached_ts = self.cache.get(cache_key)
        if opening_ts is not None:
            ts = int(opening_ts)
        elif cached_ts is not None:
            ts = cached_ts
        else:
            ts = self.clock.now().epoch_ms
        self.cache.set(cache_key, ts)
        log.debug("no persisted opening for session=%s window=%s; fallback ts=%s", session_key, window_label, ts)  # noqa: E501
        return AnchorGrid(ts=ts, grid=Grid.empty(coins.size))

    def pair_value(
        self,
        *,
        base: str,
        quote: str,
        app_session_id: str | None = None,
        window: str | None = None,
        opening_ts: int | None = None,
    ) -> tuple[int | None, float | None]:
        """
        Return `(ts, value)` of the opening cross-rate of one pair.

        Args:
            base: Base coin.
            quote: Quote coin, also used as the pivot of the two-coin universe.
            app_session_id: Session scope.
            window: Window label for the timestamp cache key.
            opening_ts: Explicit fallback timestamp.
        Returns:
            tuple[int | None, float | None]: Opening timestamp and pair value (or `None`).
        Assumptions:
            `base` and `quote` are different coins.
        Raises:
            ValueError: If coins are blank.
        Side Effects:
            Same as `fetch`.
        """
        universe = CoinUniverse.build([base, quote], pivot=quote)
        anchor = self.fetch(
            universe,
            app_session_id=app_session_id,
            window=window,
            opening_ts=opening_ts,
        )
        if universe.size < 2:
            return anchor.ts, None
        return anchor.ts, anchor.grid.get(0, 1)

    def _load_persisted_opening(
        self,
        coins: CoinUniverse,
        session_key: SessionKey,
    ) -> StampedRows | None:
        try:
            stamped = self.reader.latest_opening(coins=coins.coins, session_key=session_key)
        except Exception:  # noqa: BLE001
            log.warning("opening anchor lookup failed for session=%s", session_key, exc_info=True)
            return None
        if stamped is None or not stamped.rows:
            return None
        return stamped


def opening_cache_key(session_key: SessionKey, window: str, pivot: str = DEFAULT_PIVOT) -> str:
    return f"{session_key.value}|{window}|{pivot}"
