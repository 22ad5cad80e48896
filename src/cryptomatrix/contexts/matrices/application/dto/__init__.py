from .latest_matrices import LatestMatrices
from .stamped_rows import StampedRows
from .ticker_price import TickerPrice

__all__ = [
    "LatestMatrices",
    "StampedRows",
    "TickerPrice",
]
