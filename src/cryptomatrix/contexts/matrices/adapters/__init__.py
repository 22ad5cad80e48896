from .outbound import (
    InMemoryOpeningTimestampCache,
    MatricesPostgresGateway,
    MatricesRuntimeConfig,
    PostgresMatrixSeriesReader,
    PostgresTickerReader,
    PsycopgMatricesPostgresGateway,
    load_matrices_runtime_config,
    resolve_matrices_config_path,
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
