from __future__ import annotations


class MatricesDomainError(ValueError):
    """
    Base deterministic domain error for the matrices bounded context.

    Related:
      - src/cryptomatrix/contexts/matrices/domain/entities/grid.py
      - src/cryptomatrix/contexts/matrices/domain/entities/anchor_grid.py
      - src/cryptomatrix/contexts/matrices/domain/entities/coin_universe.py
    """


class GridInvariantError(MatricesDomainError):
    """
    Raised when a grid is not square or a diagonal (coin against itself) cell carries a value.

    Related:
      - src/cryptomatrix/contexts/matrices/domain/entities/grid.py
      - src/cryptomatrix/contexts/matrices/application/services/derivation_engine.py
    """


class AnchorGridInvariantError(MatricesDomainError):
    """
    Raised when an anchor grid without resolution timestamp still carries values.

    Related:
      - src/cryptomatrix/contexts/matrices/domain/entities/anchor_grid.py
      - src/cryptomatrix/contexts/matrices/application/services/opening_grid_resolver.py
    """
