from .postgres import (
    MatricesPostgresGateway,
    PostgresMatrixSeriesReader,
    PostgresTickerReader,
    PsycopgMatricesPostgresGateway,
)

__all__ = [
    "MatricesPostgresGateway",
    "PostgresMatrixSeriesReader",
    "PostgresTickerReader",
    "PsycopgMatricesPostgresGateway",
]
