from __future__ import annotations

import asyncio
import functools
import typing

from loguru import logger

from rowstream import data
from rowstream.service.cursor_item import CursorItem

__all__ = ("CursorProvider",)


class CursorProvider:
    def __init__(self, *, context: data.Context):
        self._context: typing.Final[data.Context] = context
        self._items: typing.Final[set[CursorItem]] = set()

    @property
    def open_count(self) -> int:
        return len(self._items)

    async def open(self, sql: str, params: data.SqlParameters | None = None) -> CursorItem:
        self._context.check_parameters(params)

        pool = self._context.pool

        try:
            cn = await pool.grab()
        except Exception as e:
            self._raise_normalized(e, stage=data.Stage.ACQUISITION)

        logger.debug(f"Acquired connection {cn!r}.")

        try:
            rows = await cn.cursor(sql, params)
        except asyncio.CancelledError:
            pool.release(cn)
            logger.debug(f"Released connection {cn!r} after opening the cursor was cancelled.")
            raise
        except Exception as e:
            pool.release(cn)
            logger.debug(f"Released connection {cn!r} after the cursor could not be created.")
            self._raise_normalized(e, stage=data.Stage.CURSOR_CREATION)

        item = CursorItem(rows=rows, on_end=functools.partial(self._end, connection=cn))
        self._items.add(item)
        logger.debug(f"Opened cursor {id(item):#x} ({len(self._items)} open).")

        return item

    async def close_all(self) -> None:
        items = tuple(self._items)
        if not items:
            return

        logger.debug(f"Closing {len(items)} open cursors...")

        results = await asyncio.gather(*(item.aclose() for item in items), return_exceptions=True)

        errors = [result for result in results if isinstance(result, BaseException)]
        for error in errors:
            logger.opt(exception=error).error(f"An error occurred while closing a cursor: {error!s}")

        if errors:
            raise errors[0]

    async def __aenter__(self) -> CursorProvider:
        return self

    async def __aexit__(self, *_: typing.Any) -> None:
        await self.close_all()

    def _raise_normalized(self, e: Exception, /, *, stage: data.Stage) -> typing.NoReturn:
        error = self._context.format_error(e, stage=stage)
        if error is e:
            raise error

        raise error from e

    def _end(self, item: CursorItem, /, *, connection: data.Connection) -> None:
        self._items.discard(item)
        self._context.pool.release(connection)
        logger.debug(f"Released connection {connection!r} ({len(self._items)} open).")
