from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class MatrixValueRow:
    """
    One persisted pairwise value (`base/quote -> value`) at a single matrix timestamp.

    Related:
      - src/cryptomatrix/contexts/matrices/application/ports/stores/matrix_anchor_reader.py
      - src/cryptomatrix/contexts/matrices/domain/services/anchor_rows.py
    """

    base: str
    quote: str
    value: float | None

    def __post_init__(self) -> None:
        object.__setattr__(self, "base", str(self.base or "").strip().upper())
        object.__setattr__(self, "quote", str(self.quote or "").strip().upper())
