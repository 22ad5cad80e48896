from .gateway import MatricesPostgresGateway, PsycopgMatricesPostgresGateway
from .matrix_series_reader import PostgresMatrixSeriesReader
from .ticker_reader import PostgresTickerReader

__all__ = [
    "MatricesPostgresGateway",
    "PostgresMatrixSeriesReader",
    "PostgresTickerReader",
    "PsycopgMatricesPostgresGateway",
]
