from __future__ import annotations

from dataclasses import dataclass

from cryptomatrix.contexts.matrices.domain.entities.grid import Grid
from cryptomatrix.contexts.matrices.domain.errors import AnchorGridInvariantError


@dataclass(frozen=True, slots=True)
class AnchorGrid:
    """
    AnchorGrid — benchmark grid captured at a significant moment plus its resolution timestamp.

    Related:
      - src/cryptomatrix/contexts/matrices/application/services/opening_grid_resolver.py
      - src/cryptomatrix/contexts/matrices/application/services/snapshot_grid_resolver.py
      - src/cryptomatrix/contexts/matrices/application/services/trade_grid_resolver.py
    """

    ts: int | None
    grid: Grid

    def __post_init__(self) -> None:
        """
        Validate that "no anchor" (`ts is None`) never carries values.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            `ts` is epoch milliseconds when present.
        Raises:
            AnchorGridInvariantError: If `ts` is `None` but the grid has values.
            ValueError: If `ts` is a bool.
        Side Effects:
            Normalizes `ts` to `int`.
        """
        if self.ts is None:
            if not self.grid.is_empty():
                raise AnchorGridInvariantError("AnchorGrid without ts must have an empty grid")
            return
        if isinstance(self.ts, bool):
            raise ValueError("AnchorGrid.ts must be epoch milliseconds, got bool")
        object.__setattr__(self, "ts", int(self.ts))

    @classmethod
    def missing(cls, size: int) -> AnchorGrid:
        """Result for "no anchor exists for this universe/session"."""
        return cls(ts=None, grid=Grid.empty(size))

    @property
    def exists(self) -> bool:
        return self.ts is not None

    @property
    def size(self) -> int:
        return self.grid.size
