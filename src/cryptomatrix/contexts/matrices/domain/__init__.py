from .entities import (
    AnchorGrid,
    CoinUniverse,
    DerivedMatrices,
    Grid,
    GridBuilder,
    LiveGrid,
    LiveGrids,
    MatrixType,
    MatrixValueRow,
    SessionKey,
    TradeStampConvention,
    new_grid,
)
from .errors import AnchorGridInvariantError, GridInvariantError, MatricesDomainError
from .services import compute_ref_block, rows_to_grid, safe_divide

__all__ = [
    "AnchorGrid",
    "AnchorGridInvariantError",
    "CoinUniverse",
    "DerivedMatrices",
    "Grid",
    "GridBuilder",
    "GridInvariantError",
    "LiveGrid",
    "LiveGrids",
    "MatricesDomainError",
    "MatrixType",
    "MatrixValueRow",
    "SessionKey",
    "TradeStampConvention",
    "compute_ref_block",
    "new_grid",
    "rows_to_grid",
    "safe_divide",
]
