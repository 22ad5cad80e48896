from .matrix_anchor_reader import MatrixAnchorReader
from .matrix_point_reader import MatrixPointReader
from .ticker_reader import TickerReader

__all__ = [
    "MatrixAnchorReader",
    "MatrixPointReader",
    "TickerReader",
]
