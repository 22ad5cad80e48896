from __future__ import annotations

from dataclasses import dataclass

from cryptomatrix.contexts.matrices.domain.entities import MatrixValueRow


@dataclass(frozen=True, slots=True)
class StampedRows:
    """
    Pairwise rows of one persisted stamp together with the stamp's authoritative timestamp.

    Related:
      - src/cryptomatrix/contexts/matrices/application/ports/stores/matrix_anchor_reader.py
      - src/cryptomatrix/contexts/matrices/application/services/opening_grid_resolver.py
    """

    ts: int
    rows: tuple[MatrixValueRow, ...]

    def __post_init__(self) -> None:
        if isinstance(self.ts, bool):
            raise ValueError("StampedRows.ts must be epoch milliseconds, got bool")
        object.__setattr__(self, "ts", int(self.ts))
        object.__setattr__(self, "rows", tuple(self.rows))
