from .derivation_engine import (
    PROVIDERS_NOT_CONFIGURED_CODE,
    MatrixDerivationEngine,
    MatrixProvidersNotConfiguredError,
    configure_providers,
)
from .live_grid_builder import DEFAULT_LOOKBACK_HOURS, LiveGridBuilder
from .matrix_providers import (
    AnchorGridFetcher,
    MatrixProviders,
    PointPrevValueLookup,
    PrefetchingPrevValueLookup,
    PrevValueLookup,
    build_matrix_providers,
)
from .opening_grid_resolver import DEFAULT_OPENING_WINDOW, OpeningGridResolver, opening_cache_key
from .snapshot_grid_resolver import SnapshotGridResolver
from .trade_grid_resolver import TradeGridResolver

__all__ = [
    "AnchorGridFetcher",
    "DEFAULT_LOOKBACK_HOURS",
    "DEFAULT_OPENING_WINDOW",
    "LiveGridBuilder",
    "MatrixDerivationEngine",
    "MatrixProviders",
    "MatrixProvidersNotConfiguredError",
    "OpeningGridResolver",
    "PROVIDERS_NOT_CONFIGURED_CODE",
    "PointPrevValueLookup",
    "PrefetchingPrevValueLookup",
    "PrevValueLookup",
    "SnapshotGridResolver",
    "TradeGridResolver",
    "build_matrix_providers",
    "configure_providers",
    "opening_cache_key",
]
