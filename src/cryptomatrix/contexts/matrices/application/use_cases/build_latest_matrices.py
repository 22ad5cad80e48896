from __future__ import annotations

import logging
from typing import Iterable, Sequence

from cryptomatrix.contexts.matrices.application.dto import LatestMatrices
from cryptomatrix.contexts.matrices.application.ports.stores import MatrixPointReader
from cryptomatrix.contexts.matrices.application.services import (
    LiveGridBuilder,
    MatrixDerivationEngine,
    OpeningGridResolver,
    SnapshotGridResolver,
    TradeGridResolver,
    build_matrix_providers,
)
from cryptomatrix.platform.errors.crypto_matrix_error import CryptoMatrixError

log = logging.getLogger(__name__)

DEFAULT_WINDOW = "30m"
ALLOWED_WINDOWS = ("15m", "30m", "1h")
EMPTY_UNIVERSE_CODE = "matrix_universe_empty"


class BuildLatestMatricesUseCase:
    """
    BuildLatestMatricesUseCase — live grids from tickers, then derived matrices against anchors.

    Related:
      - src/cryptomatrix/contexts/matrices/application/services/live_grid_builder.py
      - src/cryptomatrix/contexts/matrices/application/services/derivation_engine.py
      - src/cryptomatrix/contexts/matrices/application/dto/latest_matrices.py
      - apps/cli/wiring/modules/matrices.py
    """

    def __init__(
        self,
        *,
        live_builder: LiveGridBuilder,
        point_reader: MatrixPointReader,
        opening: OpeningGridResolver,
        snapshot: SnapshotGridResolver | None = None,
        trade: TradeGridResolver | None = None,
        default_window: str = DEFAULT_WINDOW,
        allowed_windows: Sequence[str] = ALLOWED_WINDOWS,
        prefetch_previous: bool = True,
    ) -> None:
        """
        Store collaborators and validate window policy.

        Args:
            live_builder: Ticker-backed live grid builder.
            point_reader: Previous-value store.
            opening: Opening anchor resolver.
            snapshot: Optional snapshot anchor resolver.
            trade: Optional trade anchor resolver.
            default_window: Window used when request window is missing or not allowed.
            allowed_windows: Accepted window labels.
            prefetch_previous: Batch previous-value reads per universe.
        Returns:
            None.
        Assumptions:
            Resolvers are stateless apart from the shared opening timestamp cache.
        Raises:
            ValueError: If a collaborator is missing or default window is not allowed.
        Side Effects:
            None.
        """
        if live_builder is None:  # type: ignore[truthy-bool]
            raise ValueError("BuildLatestMatricesUseCase requires live_builder")
        if point_reader is None:  # type: ignore[truthy-bool]
            raise ValueError("BuildLatestMatricesUseCase requires point_reader")
        if opening is None:  # type: ignore[truthy-bool]
            raise ValueError("BuildLatestMatricesUseCase requires opening")
        allowed = tuple(window.strip().lower() for window in allowed_windows)
        default = default_window.strip().lower()
        if default not in allowed:
            raise ValueError(
                f"BuildLatestMatricesUseCase default_window {default!r} is not in {allowed}"
            )
        self._live_builder = live_builder
        self._point_reader = point_reader
        self._opening = opening
        self._snapshot = snapshot
        self._trade = trade
        self._default_window = default
        self._allowed_windows = allowed
        self._prefetch_previous = prefetch_previous

    def normalize_window(self, raw: str | None) -> str:
        """Lower-cased window when allowed, otherwise the default window."""
        window = str(raw or "").strip().lower()
        if window in self._allowed_windows:
            return window
        return self._default_window

    def execute(
        self,
        *,
        coins: Iterable[str],
        app_session_id: str | None = None,
        window: str | None = None,
    ) -> LatestMatrices:
        """
        Build latest live and derived matrices for requested coins.

        Args:
            coins: Requested coins (pivot is appended automatically).
            app_session_id: Session scope for anchors and previous values.
            window: Requested window label.
        Returns:
            LatestMatrices: Payload-ready result.
        Assumptions:
            `now_ts` of the derivation is the live benchmark timestamp.
        Raises:
            CryptoMatrixError: If no coin was requested.
            Exception: Storage errors of live prices and previous values are propagated.
        Side Effects:
            Reads tickers, anchors and previous values from storage.
        """
        raw_coins = [str(coin or "") for coin in coins]
        requested = [coin.strip() for coin in raw_coins if coin.strip()]
        if not requested:
            raise CryptoMatrixError(
                code=EMPTY_UNIVERSE_CODE,
                message="No coins resolved for matrices universe",
                details={"requested": raw_coins},
                usage_error=True,
            )

        resolved_window = self.normalize_window(window)
        live = self._live_builder.build(requested)
        universe = live.coins
        now_ts = live.benchmark.ts

        providers = build_matrix_providers(
            point_reader=self._point_reader,
            opening=self._opening,
            snapshot=self._snapshot,
            trade=self._trade,
            app_session_id=app_session_id,
            window=resolved_window,
            prefetch_coins=universe.coins if self._prefetch_previous else None,
        )
        derived = MatrixDerivationEngine(providers).compute(
            coins=universe,
            now_ts=now_ts,
            live_benchmark=live.benchmark.grid,
        )
        log.info(
            "latest matrices built: coins=%d window=%s ts=%s opening_ts=%s",
            universe.size,
            resolved_window,
            now_ts,
            derived.opening_ts,
        )
        return LatestMatrices(
            coins=universe,
            window=resolved_window,
            ts=now_ts,
            benchmark=live.benchmark,
            pct24h=live.pct24h,
            derived=derived,
        )
