from .cache import InMemoryOpeningTimestampCache
from .config import (
    MatricesRuntimeConfig,
    load_matrices_runtime_config,
    resolve_matrices_config_path,
)
from .persistence import (
    MatricesPostgresGateway,
    PostgresMatrixSeriesReader,
    PostgresTickerReader,
    PsycopgMatricesPostgresGateway,
)

__all__ = [
    "InMemoryOpeningTimestampCache",
    "MatricesPostgresGateway",
    "MatricesRuntimeConfig",
    "PostgresMatrixSeriesReader",
    "PostgresTickerReader",
    "PsycopgMatricesPostgresGateway",
    "load_matrices_runtime_config",
    "resolve_matrices_config_path",
]
