from __future__ import annotations

import enum
import typing

__all__ = (
    "AcquisitionFailure",
    "ConfigError",
    "CursorCreationFailure",
    "DriverError",
    "InvalidParameters",
    "RowstreamError",
    "Stage",
    "StreamFailure",
    "UnrecognizedDatabaseAPI",
)


class Stage(enum.Enum):
    ACQUISITION = "acquisition"
    CURSOR_CREATION = "cursor-creation"
    STREAM = "stream"

    def __str__(self) -> str:
        return self.value


class RowstreamError(Exception):
    """Base class for errors occurring in the rowstream codebase"""


class InvalidParameters(RowstreamError):
    def __init__(self, *, errors: typing.Iterable[str]):
        self.errors: typing.Final[tuple[str, ...]] = tuple(errors)

        super().__init__("Invalid sql parameters:\n" + "\n".join(self.errors))


class DriverError(RowstreamError):
    """An error raised by a pool or connection, normalized by the error formatter."""

    def __init__(self, message: str, /, *, sqlstate: str | None = None):
        self.sqlstate: typing.Final[str | None] = sqlstate

        if sqlstate:
            super().__init__(f"{message} (sqlstate: {sqlstate})")
        else:
            super().__init__(message)


class AcquisitionFailure(DriverError):
    """The pool could not hand out a connection."""


class CursorCreationFailure(DriverError):
    """A connection was acquired, but the query could not be started on it."""


class StreamFailure(DriverError):
    """Row production failed mid-stream."""


class ConfigError(RowstreamError):
    """The config file is missing or malformed."""


class UnrecognizedDatabaseAPI(RowstreamError):
    def __init__(self, *, api: str):
        super().__init__(f"The database api specified, {api}, was not recognized.")
