from __future__ import annotations

import asyncio
import sqlite3
import typing

import aiosqlite
from loguru import logger

from rowstream import data
from rowstream.adapter.error_format import format_error

__all__ = ("SqliteConnection", "SqlitePool")


class SqliteConnection(data.Connection):
    def __init__(self, *, con: aiosqlite.Connection, batch_size: int):
        self._con: typing.Final[aiosqlite.Connection] = con
        self._batch_size: typing.Final[int] = batch_size

    @property
    def raw(self) -> aiosqlite.Connection:
        return self._con

    async def cursor(
        self,
        sql: str,
        params: data.SqlParameters | None = None,
    ) -> typing.AsyncIterator[data.Row]:
        cur = await self._con.execute(sql, params or ())
        cur.arraysize = self._batch_size
        return _iterate(cur)

    def __repr__(self) -> str:
        return f"SqliteConnection({id(self):#x})"


class SqlitePool(data.Pool):
    def __init__(
        self,
        *,
        database: str,
        batch_size: int,
        max_connections: int,
        timeout_seconds: float,
    ):
        self._database: typing.Final[str] = database
        self._batch_size: typing.Final[int] = batch_size
        self._timeout_seconds: typing.Final[float] = timeout_seconds

        self._slots: typing.Final[asyncio.Semaphore] = asyncio.Semaphore(max_connections)
        self._idle: typing.Final[list[SqliteConnection]] = []
        self._all: typing.Final[list[SqliteConnection]] = []
        self._closed = False

    async def grab(self) -> SqliteConnection:
        if self._closed:
            raise data.AcquisitionFailure("The pool is closed.")

        await asyncio.wait_for(self._slots.acquire(), timeout=self._timeout_seconds)

        if self._idle:
            return self._idle.pop()

        try:
            con = await aiosqlite.connect(self._database)
        except BaseException:
            self._slots.release()
            raise

        con.row_factory = aiosqlite.Row

        cn = SqliteConnection(con=con, batch_size=self._batch_size)
        self._all.append(cn)
        logger.debug(f"Opened sqlite connection to {self._database} ({len(self._all)} total).")

        return cn

    def release(self, connection: data.Connection, /) -> None:
        self._idle.append(typing.cast(SqliteConnection, connection))
        self._slots.release()

    async def close(self) -> None:
        self._closed = True

        for cn in self._all:
            await cn.raw.close()

        self._all.clear()
        self._idle.clear()

    def __repr__(self) -> str:
        return f"SqlitePool(database={self._database!r})"


async def _iterate(cur: aiosqlite.Cursor, /) -> typing.AsyncGenerator[data.Row, None]:
    try:
        async for row in cur:
            yield dict(row)
    except sqlite3.Error as e:
        raise format_error(e, stage=data.Stage.STREAM) from e
    finally:
        await cur.close()
