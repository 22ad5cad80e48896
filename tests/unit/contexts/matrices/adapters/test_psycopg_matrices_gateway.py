from __future__ import annotations

from typing import Any, Mapping

import pytest

from cryptomatrix.contexts.matrices.adapters.outbound.persistence.postgres import (
    PsycopgMatricesPostgresGateway,
)


class _FakeCursor:
    def __init__(self, rows: list[Mapping[str, Any]]) -> None:
        self._rows = rows
        self.executed: list[tuple[Any, Mapping[str, Any]]] = []

    def __enter__(self) -> _FakeCursor:
        return self

    def __exit__(self, *exc: object) -> None:
        return None

    def execute(self, query: Any, parameters: Mapping[str, Any]) -> None:
        self.executed.append((query, parameters))

    def fetchone(self) -> Mapping[str, Any] | None:
        return self._rows[0] if self._rows else None

    def fetchall(self) -> list[Mapping[str, Any]]:
        return list(self._rows)


class _FakeConnection:
    def __init__(self, cursor: _FakeCursor) -> None:
        self._cursor = cursor
        self.closed = False

    def __enter__(self) -> _FakeConnection:
        return self

    def __exit__(self, *exc: object) -> None:
        self.closed = True

    def cursor(self) -> _FakeCursor:
        return self._cursor


def _install_fake_connect(
    monkeypatch: pytest.MonkeyPatch,
    rows: list[Mapping[str, Any]],
) -> tuple[list[dict[str, Any]], _FakeCursor, list[_FakeConnection]]:
    connect_calls: list[dict[str, Any]] = []
    cursor = _FakeCursor(rows)
    connections: list[_FakeConnection] = []

    def _fake_connect(dsn: str, **kwargs: Any) -> _FakeConnection:
        connect_calls.append({"dsn": dsn, **kwargs})
        connection = _FakeConnection(cursor)
        connections.append(connection)
        return connection

    monkeypatch.setattr(
        "cryptomatrix.contexts.matrices.adapters.outbound.persistence.postgres.gateway."
        "psycopg.connect",
        _fake_connect,
    )
    return connect_calls, cursor, connections


def test_fetch_one_opens_read_only_session_with_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    connect_calls, cursor, connections = _install_fake_connect(
        monkeypatch,
        [{"snapshot_stamp_ms": 1_000}],
    )
    gateway = PsycopgMatricesPostgresGateway(dsn=" postgresql://db/matrices ", connect_timeout_s=3)

    row = gateway.fetch_one(query="SELECT 1", parameters={"ts": 5})

    assert row == {"snapshot_stamp_ms": 1_000}
    assert connect_calls[0]["dsn"] == "postgresql://db/matrices"
    assert connect_calls[0]["connect_timeout"] == 3
    assert connect_calls[0]["application_name"] == "cryptomatrix-matrices"
    assert "default_transaction_read_only=on" in connect_calls[0]["options"]
    assert cursor.executed == [("SELECT 1", {"ts": 5})]
    assert connections[0].closed is True


def test_fetch_one_without_rows_returns_none(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_fake_connect(monkeypatch, [])
    gateway = PsycopgMatricesPostgresGateway(dsn="postgresql://db/matrices")

    assert gateway.fetch_one(query="SELECT 1", parameters={}) is None


def test_fetch_all_returns_plain_dict_rows(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_fake_connect(monkeypatch, [{"base": "BTC"}, {"base": "ETH"}])
    gateway = PsycopgMatricesPostgresGateway(dsn="postgresql://db/matrices")

    rows = gateway.fetch_all(query="SELECT base", parameters={})

    assert rows == ({"base": "BTC"}, {"base": "ETH"})


@pytest.mark.parametrize(
    ("dsn", "timeout"),
    [(" ", 5), ("postgresql://db/matrices", 0), ("postgresql://db/matrices", True)],
)
def test_gateway_rejects_invalid_settings(dsn: str, timeout: int) -> None:
    with pytest.raises(ValueError):
        PsycopgMatricesPostgresGateway(dsn=dsn, connect_timeout_s=timeout)
