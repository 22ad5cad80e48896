from __future__ import annotations

from dataclasses import dataclass

from cryptomatrix.contexts.matrices.domain.entities.coin_universe import CoinUniverse
from cryptomatrix.contexts.matrices.domain.entities.grid import Grid
from cryptomatrix.contexts.matrices.domain.errors import GridInvariantError


@dataclass(frozen=True, slots=True)
class LiveGrid:
    """Live grid built from ticker prices, stamped with the freshest price time (epoch ms)."""

    ts: int
    grid: Grid


@dataclass(frozen=True, slots=True)
class LiveGrids:
    """
    LiveGrids — live benchmark and 24h-change grids over the priced coin universe.

    Related:
      - src/cryptomatrix/contexts/matrices/application/services/live_grid_builder.py
      - src/cryptomatrix/contexts/matrices/application/use_cases/build_latest_matrices.py
    """

    coins: CoinUniverse
    benchmark: LiveGrid
    pct24h: LiveGrid

    def __post_init__(self) -> None:
        n = self.coins.size
        if self.benchmark.grid.size != n or self.pct24h.grid.size != n:
            raise GridInvariantError(
                f"LiveGrids grids must match universe size {n}, "
                f"got benchmark={self.benchmark.grid.size} pct24h={self.pct24h.grid.size}"
            )
