from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Protocol, cast

import psycopg
from psycopg.rows import dict_row

log = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT_S = 5
DEFAULT_APPLICATION_NAME = "cryptomatrix-matrices"


class MatricesPostgresGateway(Protocol):
    """
    Read-only SQL seam shared by the matrix series and ticker readers.

    Both methods take named `%(param)s` binds and return rows keyed by column name;
    driver errors propagate to the caller.

    Related:
      - src/cryptomatrix/contexts/matrices/adapters/outbound/persistence/postgres/
        matrix_series_reader.py
      - src/cryptomatrix/contexts/matrices/adapters/outbound/persistence/postgres/ticker_reader.py
    """

    def fetch_one(self, *, query: str, parameters: Mapping[str, Any]) -> Mapping[str, Any] | None:
        ...

    def fetch_all(
        self,
        *,
        query: str,
        parameters: Mapping[str, Any],
    ) -> tuple[Mapping[str, Any], ...]:
        ...


class PsycopgMatricesPostgresGateway(MatricesPostgresGateway):
    """
    psycopg 3 gateway opening one read-only connection per query.

    Matrices adapters never write, so every session is started with
    `default_transaction_read_only` and a bounded connect timeout.

    Related:
      - src/cryptomatrix/contexts/matrices/adapters/outbound/persistence/postgres/gateway.py
      - apps/cli/wiring/modules/matrices.py
    """

    def __init__(
        self,
        *,
        dsn: str,
        connect_timeout_s: int = DEFAULT_CONNECT_TIMEOUT_S,
        application_name: str = DEFAULT_APPLICATION_NAME,
    ) -> None:
        """
        Validate connection settings.

        Args:
            dsn: PostgreSQL DSN (URL or key/value form).
            connect_timeout_s: Seconds to wait for a connection.
            application_name: Name reported in `pg_stat_activity`.
        Returns:
            None.
        Assumptions:
            DSN points to the database holding `matrices`, `snapshot` and `market` schemas.
        Raises:
            ValueError: If DSN is blank or timeout is not positive.
        Side Effects:
            None.
        """
        normalized_dsn = dsn.strip()
        if not normalized_dsn:
            raise ValueError("PsycopgMatricesPostgresGateway requires non-empty dsn")
        if isinstance(connect_timeout_s, bool) or connect_timeout_s <= 0:
            raise ValueError(
                f"PsycopgMatricesPostgresGateway.connect_timeout_s must be > 0, "
                f"got {connect_timeout_s}"
            )
        self._dsn = normalized_dsn
        self._connect_timeout_s = int(connect_timeout_s)
        self._application_name = application_name.strip() or DEFAULT_APPLICATION_NAME

    def fetch_one(self, *, query: str, parameters: Mapping[str, Any]) -> Mapping[str, Any] | None:
        with self._cursor() as cursor:
            cursor.execute(cast(Any, query), dict(parameters))
            row = cursor.fetchone()
        return None if row is None else dict(row)

    def fetch_all(
        self,
        *,
        query: str,
        parameters: Mapping[str, Any],
    ) -> tuple[Mapping[str, Any], ...]:
        with self._cursor() as cursor:
            cursor.execute(cast(Any, query), dict(parameters))
            rows = cursor.fetchall()
        log.debug("matrices query returned %d row(s)", len(rows))
        return tuple(dict(row) for row in rows)

    @contextmanager
    def _cursor(self) -> Iterator[Any]:
        connection = psycopg.connect(
            self._dsn,
            row_factory=cast(Any, dict_row),
            connect_timeout=self._connect_timeout_s,
            application_name=self._application_name,
            options="-c default_transaction_read_only=on",
        )
        with connection:
            with connection.cursor() as cursor:
                yield cursor
