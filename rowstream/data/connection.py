import abc
import typing

from rowstream.data.row import Row, SqlParameters

__all__ = ("Connection",)


class Connection(abc.ABC):
    @abc.abstractmethod
    async def cursor(
        self,
        sql: str,
        params: SqlParameters | None = None,
    ) -> typing.AsyncIterator[Row]:
        """Start the query and return its raw row sequence.

        The returned iterator may expose an ``aclose()`` coroutine, which is
        treated as its cancellation hook.
        """
        raise NotImplementedError
