from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from cryptomatrix.contexts.matrices.domain.entities import (
    CoinUniverse,
    DerivedMatrices,
    LiveGrid,
)

_SNAPSHOT_MATRICES = frozenset({"pct_snap", "snap"})
_TRADE_MATRICES = frozenset({"pct_traded", "traded"})


@dataclass(frozen=True, slots=True)
class LatestMatrices:
    """
    LatestMatrices — live grids plus derived matrices for one universe at one moment.

    Related:
      - src/cryptomatrix/contexts/matrices/application/use_cases/build_latest_matrices.py
      - apps/cli/commands/matrices_latest.py
    """

    coins: CoinUniverse
    window: str
    ts: int
    benchmark: LiveGrid
    pct24h: LiveGrid
    derived: DerivedMatrices

    def to_payload(self) -> dict[str, Any]:
        """
        Build deterministic JSON-compatible payload.

        Args:
            None.
        Returns:
            dict[str, Any]: `{"ok", "coins", "symbols", "quote", "window", "ts", "matrices",
            "meta"}` where every matrix is `{"ts": int, "values": {base: {quote: value}}}`.
        Assumptions:
            `coins` lists the displayable (non-pivot) coins; `meta.universe` keeps the full
            grid order including the pivot.
        Raises:
            None.
        Side Effects:
            None.
        """
        universe = list(self.coins.coins)
        matrices: dict[str, dict[str, Any]] = {
            "benchmark": {"ts": self.ts, "values": self.benchmark.grid.to_values(universe)},
            "pct24h": {"ts": self.ts, "values": self.pct24h.grid.to_values(universe)},
        }
        for name, grid in self.derived.grids().items():
            matrices[name] = {"ts": self._matrix_ts(name), "values": grid.to_values(universe)}

        return {
            "ok": True,
            "coins": list(self.coins.non_pivot()),
            "symbols": [
                f"{base}{quote}" for base in universe for quote in universe if base != quote
            ],
            "quote": self.coins.pivot,
            "window": self.window,
            "ts": self.ts,
            "matrices": matrices,
            "meta": {
                "opening_ts": self.derived.opening_ts,
                "snapshot_ts": self.derived.snapshot_ts,
                "trade_ts": self.derived.trade_ts,
                "universe": universe,
            },
        }

    def _matrix_ts(self, name: str) -> int:
        if name in _SNAPSHOT_MATRICES and self.derived.snapshot_ts is not None:
            return self.derived.snapshot_ts
        if name in _TRADE_MATRICES and self.derived.trade_ts is not None:
            return self.derived.trade_ts
        return self.ts
