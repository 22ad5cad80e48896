from .dto import LatestMatrices, StampedRows, TickerPrice
from .ports import (
    Clock,
    MatrixAnchorReader,
    MatrixPointReader,
    OpeningTimestampCache,
    TickerReader,
)
from .services import (
    LiveGridBuilder,
    MatrixDerivationEngine,
    MatrixProviders,
    MatrixProvidersNotConfiguredError,
    OpeningGridResolver,
    PrefetchingPrevValueLookup,
    SnapshotGridResolver,
    TradeGridResolver,
    build_matrix_providers,
    configure_providers,
)
from .use_cases import BuildLatestMatricesUseCase

__all__ = [
    "BuildLatestMatricesUseCase",
    "Clock",
    "LatestMatrices",
    "LiveGridBuilder",
    "MatrixAnchorReader",
    "MatrixDerivationEngine",
    "MatrixPointReader",
    "MatrixProviders",
    "MatrixProvidersNotConfiguredError",
    "OpeningGridResolver",
    "OpeningTimestampCache",
    "PrefetchingPrevValueLookup",
    "SnapshotGridResolver",
    "StampedRows",
    "TickerPrice",
    "TickerReader",
    "TradeGridResolver",
    "build_matrix_providers",
    "configure_providers",
]
