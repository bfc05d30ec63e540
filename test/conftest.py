from __future__ import annotations

import asyncio
import functools
import json
import pathlib
import sqlite3
import typing

import pytest

from rowstream import adapter, data, service


class FakeRows:
    """Raw row sequence over a fixed list of rows that records how it was cleaned up."""

    def __init__(
        self,
        rows: typing.Iterable[data.Row],
        *,
        events: list[str],
        name: str = "rows",
        fail_at: int | None = None,
        error: Exception | None = None,
        aclose_error: Exception | None = None,
        gate: asyncio.Event | None = None,
    ):
        self._rows = list(rows)
        self._ix = 0
        self._events = events
        self._name = name
        self._fail_at = fail_at
        self._error = error
        self._aclose_error = aclose_error
        self._gate = gate

        self.aclose_calls = 0
        self.aclose_finished = False

    def __aiter__(self) -> FakeRows:
        return self

    async def __anext__(self) -> data.Row:
        await asyncio.sleep(0)

        if self._fail_at is not None and self._ix == self._fail_at:
            raise typing.cast(Exception, self._error)

        if self._ix >= len(self._rows):
            raise StopAsyncIteration

        row = self._rows[self._ix]
        self._ix += 1
        return row

    async def aclose(self) -> None:
        self.aclose_calls += 1
        self._events.append(f"aclose:{self._name}")

        if self._gate is not None:
            await self._gate.wait()

        self.aclose_finished = True

        if self._aclose_error is not None:
            raise self._aclose_error


class FakeConnection(data.Connection):
    def __init__(self, *, pool: FakePool, name: str):
        self._pool = pool
        self.name = name

    async def cursor(
        self,
        sql: str,
        params: data.SqlParameters | None = None,
    ) -> typing.AsyncIterator[data.Row]:
        await asyncio.sleep(0)

        if self._pool.cursor_gate is not None:
            await self._pool.cursor_gate.wait()

        self._pool.queries.append((sql, params))

        if self._pool.cursor_error is not None:
            raise self._pool.cursor_error

        rows = FakeRows(
            self._pool.row_data,
            events=self._pool.events,
            name=self.name,
            fail_at=self._pool.fail_at,
            error=self._pool.stream_error,
            aclose_error=self._pool.aclose_error,
        )
        self._pool.rows.append(rows)
        return rows

    def __repr__(self) -> str:
        return f"FakeConnection({self.name})"


class FakePool(data.Pool):
    def __init__(self, *, events: list[str]):
        self.events = events

        self.row_data: list[data.Row] = [{"id": 1}, {"id": 2}]
        self.grab_error: Exception | None = None
        self.cursor_error: Exception | None = None
        self.cursor_gate: asyncio.Event | None = None
        self.stream_error: Exception | None = None
        self.fail_at: int | None = None
        self.aclose_error: Exception | None = None

        self.queries: list[tuple[str, data.SqlParameters | None]] = []
        self.rows: list[FakeRows] = []
        self.grabbed: list[FakeConnection] = []
        self.released: list[FakeConnection] = []
        self.closed = False

    async def grab(self) -> FakeConnection:
        await asyncio.sleep(0)

        if self.grab_error is not None:
            raise self.grab_error

        cn = FakeConnection(pool=self, name=f"cn{len(self.grabbed)}")
        self.grabbed.append(cn)
        return cn

    def release(self, connection: data.Connection, /) -> None:
        cn = typing.cast(FakeConnection, connection)
        self.events.append(f"release:{cn.name}")
        self.released.append(cn)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture(scope="function")
def events_fixture() -> list[str]:
    return []


@pytest.fixture(scope="function")
def rows_factory_fixture(events_fixture: list[str]) -> typing.Callable[..., FakeRows]:
    return functools.partial(FakeRows, events=events_fixture)


@pytest.fixture(scope="function")
def pool_fixture(events_fixture: list[str]) -> FakePool:
    return FakePool(events=events_fixture)


@pytest.fixture(scope="function")
def context_fixture(pool_fixture: FakePool) -> data.Context:
    return adapter.create_context(pool=pool_fixture)


@pytest.fixture(scope="function")
def provider_fixture(context_fixture: data.Context) -> service.CursorProvider:
    return service.CursorProvider(context=context_fixture)


@pytest.fixture(scope="function")
def sqlite_db_fixture(tmp_path: pathlib.Path) -> pathlib.Path:
    db_path = tmp_path / "test.db"
    with sqlite3.connect(db_path) as con:
        con.execute("CREATE TABLE customer (customer_id INTEGER PRIMARY KEY, first_name TEXT NOT NULL)")
        con.executemany(
            "INSERT INTO customer (customer_id, first_name) VALUES (?, ?)",
            [(1, "Steve"), (2, "Mandie"), (3, "Bill")],
        )
    con.close()
    return db_path


@pytest.fixture(scope="function")
def config_file_fixture(tmp_path: pathlib.Path, sqlite_db_fixture: pathlib.Path) -> pathlib.Path:
    config_file = tmp_path / "config.json"
    config_file.write_text(
        json.dumps({
            "batch-size": 2,
            "databases": [
                {
                    "name": "local",
                    "api": "sqlite",
                    "host": None,
                    "db-name": None,
                    "keyring-db-username-entry": None,
                    "keyring-db-password-entry": None,
                    "connection-string": str(sqlite_db_fixture),
                    "max-connections": 2,
                    "timeout-seconds": 5,
                },
                {
                    "name": "warehouse",
                    "api": "psycopg",
                    "host": "localhost",
                    "db-name": "wh",
                    "keyring-db-username-entry": "wh-user",
                    "keyring-db-password-entry": "wh-password",
                    "connection-string": None,
                },
            ],
        })
    )
    return config_file


@pytest.fixture(scope="function")
def _root_dir_fixture(request: typing.Any) -> pathlib.Path:
    return next(p for p in pathlib.Path(request.fspath).parents if p.name == "test")


@pytest.fixture(scope="function")
def _test_config_fixture(_root_dir_fixture: pathlib.Path) -> dict[str, typing.Any]:
    config_path = _root_dir_fixture / "test-config.json"
    if not config_path.exists():
        pytest.skip(f"{config_path} not found.")

    with config_path.open("r") as fh:
        return typing.cast(dict[str, typing.Any], json.load(fh))


@pytest.fixture(scope="function")
def pg_connection_str_fixture(_test_config_fixture: dict[str, typing.Any]) -> str:
    return typing.cast(str, _test_config_fixture["ds"]["pg"]["connection-string"])
