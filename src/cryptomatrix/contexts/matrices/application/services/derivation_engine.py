from __future__ import annotations

import logging
from dataclasses import dataclass

from cryptomatrix.contexts.matrices.application.services.matrix_providers import (
    AnchorGridFetcher,
    MatrixProviders,
)
from cryptomatrix.contexts.matrices.domain.entities import (
    DERIVED_MATRIX_NAMES,
    AnchorGrid,
    CoinUniverse,
    DerivedMatrices,
    Grid,
    GridBuilder,
    MatrixType,
)
from cryptomatrix.contexts.matrices.domain.errors import GridInvariantError
from cryptomatrix.contexts.matrices.domain.services import (
    anchor_relative_change,
    compute_ref_block,
    is_present,
    safe_divide,
)
from cryptomatrix.platform.errors.crypto_matrix_error import CryptoMatrixError

log = logging.getLogger(__name__)

PROVIDERS_NOT_CONFIGURED_CODE = "matrix_providers_not_configured"


@dataclass(frozen=True)
class MatrixProvidersNotConfiguredError(CryptoMatrixError):
    """Raised by `MatrixDerivationEngine.compute` before any providers were configured."""

    code: str = PROVIDERS_NOT_CONFIGURED_CODE
    message: str = "Matrix providers are not configured"


class MatrixDerivationEngine:
    """
    MatrixDerivationEngine — derive nine NxN matrices from a live benchmark grid and anchors.

    Per ordered pair `(i, j)`, `i != j`, with `bm_now = live[i][j]`:
      id_pct     = (bm_now - bm_prev) / bm_prev
      pct_drv    = id_pct - prev_id_pct
      pct_ref    = (bm_open - bm_now) / bm_open
      ref        = pct_ref * id_pct
      delta      = bm_now - bm_open * (1 + ref)
      pct_snap   = (bm_snap - bm_now) / bm_snap
      snap       = (1 + id_pct) * pct_snap
      pct_traded = (bm_trade - bm_now) / bm_trade
      traded     = (1 + id_pct) * pct_traded

    Any missing operand yields `None` for the cell; the diagonal is never computed.

    Related:
      - src/cryptomatrix/contexts/matrices/application/services/matrix_providers.py
      - src/cryptomatrix/contexts/matrices/domain/services/grid_math.py
      - src/cryptomatrix/contexts/matrices/application/use_cases/build_latest_matrices.py
    """

    def __init__(self, providers: MatrixProviders | None = None) -> None:
        self._providers = providers

    @property
    def providers(self) -> MatrixProviders | None:
        return self._providers

    def configure_providers(self, providers: MatrixProviders) -> None:
        """Install (or replace) data access callables used by subsequent `compute` calls."""
        if providers is None:  # type: ignore[truthy-bool]
            raise ValueError("MatrixDerivationEngine.configure_providers requires providers")
        self._providers = providers

    def compute(
        self,
        *,
        coins: CoinUniverse,
        now_ts: int,
        live_benchmark: Grid,
    ) -> DerivedMatrices:
        """
        Compute derived matrices for one universe at one moment.

        Args:
            coins: Universe defining row/column order.
            now_ts: Reference time in epoch milliseconds; previous values are strictly older.
            live_benchmark: Current benchmark grid aligned with `coins`.
        Returns:
            DerivedMatrices: Nine grids plus the resolved anchor timestamps.
        Assumptions:
            Anchors are resolved once per call: opening, snapshot, then trade.
        Raises:
            MatrixProvidersNotConfiguredError: If no providers were configured.
            GridInvariantError: If live or anchor grids do not match universe size.
            Exception: Errors of `get_prev` are propagated unchanged.
        Side Effects:
            Calls providers; reads storage through them.
        """
        providers = self._providers
        if providers is None:
            raise MatrixProvidersNotConfiguredError()

        n = coins.size
        if live_benchmark.size != n:
            raise GridInvariantError(
                f"live benchmark grid size {live_benchmark.size} does not match universe size {n}"
            )

        opening = _checked_anchor("opening", providers.fetch_opening_grid(coins, now_ts), n)
        snapshot = _optional_anchor("snapshot", providers.fetch_snapshot_grid, coins, now_ts)
        trade = _optional_anchor("trade", providers.fetch_trade_grid, coins, now_ts)
        log.debug(
            "matrix anchors resolved: now_ts=%s opening_ts=%s snapshot_ts=%s trade_ts=%s",
            now_ts,
            opening.ts,
            snapshot.ts,
            trade.ts,
        )

        builders = {name: GridBuilder(n) for name in DERIVED_MATRIX_NAMES}
        for i, base in enumerate(coins):
            for j, quote in enumerate(coins):
                if i == j:
                    continue
                bm_now = live_benchmark.get(i, j)

                bm_prev = providers.get_prev(MatrixType.BENCHMARK, base, quote, now_ts)
                id_pct = None
                if bm_prev is not None and bm_now is not None:
                    id_pct = safe_divide(bm_now - bm_prev, bm_prev)

                prev_id = providers.get_prev(MatrixType.ID_PCT, base, quote, now_ts)
                pct_drv = None
                if id_pct is not None and is_present(prev_id):
                    pct_drv = id_pct - float(prev_id)  # type: ignore[arg-type]

                open_val = opening.grid.get(i, j)
                pct_ref, ref = compute_ref_block(
                    benchmark_new=bm_now,
                    id_pct=id_pct,
                    ref_value=open_val,
                )
                delta = None
                if bm_now is not None and open_val is not None and ref is not None:
                    delta = bm_now - open_val * (1 + ref)

                pct_snap = anchor_relative_change(snapshot.grid.get(i, j), bm_now)
                pct_traded = anchor_relative_change(trade.grid.get(i, j), bm_now)

                cells = {
                    "id_pct": id_pct,
                    "pct_drv": pct_drv,
                    "pct_ref": pct_ref,
                    "ref": ref,
                    "delta": delta,
                    "pct_snap": pct_snap,
                    "snap": _scaled_by_momentum(pct_snap, id_pct),
                    "pct_traded": pct_traded,
                    "traded": _scaled_by_momentum(pct_traded, id_pct),
                }
                for name, value in cells.items():
                    builders[name].set(i, j, value)

        grids = {name: builder.build() for name, builder in builders.items()}
        return DerivedMatrices(
            **grids,
            opening_ts=opening.ts,
            snapshot_ts=snapshot.ts,
            trade_ts=trade.ts,
        )


def configure_providers(providers: MatrixProviders) -> MatrixDerivationEngine:
    """Return an engine bound to `providers`."""
    engine = MatrixDerivationEngine()
    engine.configure_providers(providers)
    return engine


def _scaled_by_momentum(pct: float | None, id_pct: float | None) -> float | None:
    if pct is None or id_pct is None:
        return None
    return (1 + id_pct) * pct


def _optional_anchor(
    name: str,
    fetcher: AnchorGridFetcher | None,
    coins: CoinUniverse,
    now_ts: int,
) -> AnchorGrid:
    if fetcher is None:
        return AnchorGrid.missing(coins.size)
    return _checked_anchor(name, fetcher(coins, now_ts), coins.size)


def _checked_anchor(name: str, anchor: AnchorGrid, size: int) -> AnchorGrid:
    if anchor.size != size:
        raise GridInvariantError(
            f"{name} anchor grid size {anchor.size} does not match universe size {size}"
        )
    return anchor
