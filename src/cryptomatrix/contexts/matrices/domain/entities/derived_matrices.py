from __future__ import annotations

from dataclasses import dataclass

from cryptomatrix.contexts.matrices.domain.entities.grid import Grid
from cryptomatrix.contexts.matrices.domain.errors import GridInvariantError

DERIVED_MATRIX_NAMES = (
    "id_pct",
    "pct_drv",
    "pct_ref",
    "ref",
    "delta",
    "pct_snap",
    "snap",
    "pct_traded",
    "traded",
)


@dataclass(frozen=True, slots=True)
class DerivedMatrices:
    """
    Output of one derivation call: nine NxN grids plus the anchor timestamps they used.

    Related:
      - src/cryptomatrix/contexts/matrices/application/services/derivation_engine.py
      - src/cryptomatrix/contexts/matrices/application/use_cases/build_latest_matrices.py
    """

    id_pct: Grid
    pct_drv: Grid
    pct_ref: Grid
    ref: Grid
    delta: Grid
    pct_snap: Grid
    snap: Grid
    pct_traded: Grid
    traded: Grid
    opening_ts: int | None = None
    snapshot_ts: int | None = None
    trade_ts: int | None = None

    def __post_init__(self) -> None:
        sizes = {self.grids()[name].size for name in DERIVED_MATRIX_NAMES}
        if len(sizes) != 1:
            raise GridInvariantError(f"DerivedMatrices grids must share one size, got {sorted(sizes)}")  # noqa: E501

    @property
    def size(self) -> int:
        return self.id_pct.size

    def grids(self) -> dict[str, Grid]:
        """Derived grids keyed by matrix name in canonical order."""
        return {name: getattr(self, name) for name in DERIVED_MATRIX_NAMES}
