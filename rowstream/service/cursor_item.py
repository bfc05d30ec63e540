from __future__ import annotations

import asyncio
import typing

from loguru import logger

from rowstream import data

__all__ = ("CursorItem",)


class CursorItem:
    """Controlled row sequence wrapping one raw row sequence.

    The item is Active while it holds the raw sequence and Closed once the
    reference is cleared. ``on_end`` is called exactly once, on the transition
    to Closed, and always before the raw sequence's own ``aclose`` hook runs.
    """

    def __init__(
        self,
        *,
        rows: typing.AsyncIterator[data.Row],
        on_end: typing.Callable[[CursorItem], None],
    ):
        self._rows: typing.AsyncIterator[data.Row] | None = rows
        self._on_end: typing.Final[typing.Callable[[CursorItem], None]] = on_end

    @property
    def closed(self) -> bool:
        return self._rows is None

    def __aiter__(self) -> CursorItem:
        return self

    async def __anext__(self) -> data.Row:
        rows = self._rows
        if rows is None:
            raise StopAsyncIteration

        try:
            return await rows.__anext__()
        except StopAsyncIteration:
            self._end()
            raise
        except (Exception, asyncio.CancelledError) as e:
            await self.athrow(e)

    async def aclose(self) -> None:
        rows = self._rows
        if rows is None:
            return

        self._end()

        if (aclose := getattr(rows, "aclose", None)) is not None:
            await aclose()

    async def athrow(self, error: BaseException, /) -> typing.NoReturn:
        rows = self._rows
        if rows is None:
            raise error

        self._end()

        if (aclose := getattr(rows, "aclose", None)) is not None:
            try:
                await aclose()
            except Exception as cleanup_error:
                logger.opt(exception=cleanup_error).warning(
                    f"An error occurred while cleaning up a failed cursor: {cleanup_error!s}"
                )

        raise error

    async def __aenter__(self) -> CursorItem:
        return self

    async def __aexit__(self, *_: typing.Any) -> None:
        await self.aclose()

    def _end(self) -> None:
        self._rows = None
        self._on_end(self)

    def __repr__(self) -> str:
        state = "closed" if self.closed else "active"
        return f"CursorItem({state})"
