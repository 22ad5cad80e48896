from .anchor_grid import AnchorGrid
from .coin_universe import DEFAULT_PIVOT, CoinUniverse
from .derived_matrices import DERIVED_MATRIX_NAMES, DerivedMatrices
from .grid import Cell, Grid, GridBuilder, GridValues, new_grid
from .live_grids import LiveGrid, LiveGrids
from .matrix_type import MatrixType, TradeStampConvention
from .matrix_value_row import MatrixValueRow
from .session_key import GLOBAL_SESSION, SessionKey

__all__ = [
    "AnchorGrid",
    "Cell",
    "CoinUniverse",
    "DEFAULT_PIVOT",
    "DERIVED_MATRIX_NAMES",
    "DerivedMatrices",
    "GLOBAL_SESSION",
    "Grid",
    "GridBuilder",
    "GridValues",
    "LiveGrid",
    "LiveGrids",
    "MatrixType",
    "MatrixValueRow",
    "SessionKey",
    "TradeStampConvention",
    "new_grid",
]
