from __future__ import annotations

import asyncio
import typing
import uuid

import keyring
import psycopg
import psycopg_pool
from loguru import logger
from psycopg.conninfo import make_conninfo
from psycopg.pq import TransactionStatus
from psycopg.rows import dict_row

from rowstream import data
from rowstream.adapter.error_format import format_error

__all__ = ("PgConnection", "PgPool", "conninfo")


class PgConnection(data.Connection):
    def __init__(self, *, con: psycopg.AsyncConnection, batch_size: int):
        self._con: typing.Final[psycopg.AsyncConnection] = con
        self._batch_size: typing.Final[int] = batch_size

    @property
    def raw(self) -> psycopg.AsyncConnection:
        return self._con

    async def cursor(
        self,
        sql: str,
        params: data.SqlParameters | None = None,
    ) -> typing.AsyncIterator[data.Row]:
        cur = self._con.cursor(name=f"rowstream_{uuid.uuid4().hex}", row_factory=dict_row)
        cur.itersize = self._batch_size

        try:
            await cur.execute(typing.cast(typing.LiteralString, sql), params)
        except BaseException:
            await cur.close()
            raise

        return _iterate(cur)

    def __repr__(self) -> str:
        return f"PgConnection({id(self._con):#x})"


class PgPool(data.Pool):
    def __init__(
        self,
        *,
        db_config: data.DbConfig,
        batch_size: int,
    ):
        self._db_config: typing.Final[data.DbConfig] = db_config
        self._batch_size: typing.Final[int] = batch_size

        self._pool: typing.Final[psycopg_pool.AsyncConnectionPool] = psycopg_pool.AsyncConnectionPool(
            conninfo(db_config=db_config),
            min_size=1,
            max_size=db_config.max_connections,
            timeout=db_config.timeout_seconds,
            open=False,
        )
        self._pending: typing.Final[set[asyncio.Task[None]]] = set()
        self._opened = False

    async def grab(self) -> PgConnection:
        if not self._opened:
            await self._pool.open(wait=True, timeout=self._db_config.timeout_seconds)
            self._opened = True

        con = await self._pool.getconn(timeout=self._db_config.timeout_seconds)

        return PgConnection(con=con, batch_size=self._batch_size)

    def release(self, connection: data.Connection, /) -> None:
        cn = typing.cast(PgConnection, connection)

        task = asyncio.get_running_loop().create_task(self._put(cn))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def close(self) -> None:
        if self._pending:
            await asyncio.gather(*self._pending)

        await self._pool.close()
        self._opened = False

    async def _put(self, cn: PgConnection, /) -> None:
        con = cn.raw
        try:
            if con.info.transaction_status != TransactionStatus.IDLE:
                await con.rollback()
        except psycopg.Error as e:
            logger.warning(f"An error occurred while rolling back {cn!r} before returning it: {e!s}")
        finally:
            try:
                await self._pool.putconn(con)
            except Exception as e:
                logger.opt(exception=e).error(f"An error occurred while returning {cn!r} to the pool.")

    def __repr__(self) -> str:
        return f"PgPool(db_id={self._db_config.db_id!r})"


def conninfo(*, db_config: data.DbConfig) -> str:
    if db_config.connection_string is not None:
        return db_config.connection_string.get_secret_value()

    username = keyring.get_password("system", typing.cast(str, db_config.keyring_db_username_entry))
    password = keyring.get_password("system", typing.cast(str, db_config.keyring_db_password_entry))

    return make_conninfo(
        host=db_config.host,
        dbname=db_config.db_name,
        user=username,
        password=password,
    )


async def _iterate(cur: psycopg.AsyncServerCursor[typing.Any], /) -> typing.AsyncGenerator[data.Row, None]:
    try:
        async for row in cur:
            yield row
    except psycopg.Error as e:
        raise format_error(e, stage=data.Stage.STREAM) from e
    finally:
        await cur.close()
