import abc

from rowstream.data.connection import Connection

__all__ = ("Pool",)


class Pool(abc.ABC):
    @abc.abstractmethod
    async def grab(self) -> Connection:
        raise NotImplementedError

    @abc.abstractmethod
    def release(self, connection: Connection, /) -> None:
        """Hand a connection back to the pool.

        Must not fail in a way that loses the connection.
        """
        raise NotImplementedError

    @abc.abstractmethod
    async def close(self) -> None:
        raise NotImplementedError
