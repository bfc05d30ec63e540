import sqlite3
import typing

import psycopg

from rowstream import data

__all__ = ("format_error",)

_ERROR_TYPES: typing.Final[dict[data.Stage, type[data.DriverError]]] = {
    data.Stage.ACQUISITION: data.AcquisitionFailure,
    data.Stage.CURSOR_CREATION: data.CursorCreationFailure,
    data.Stage.STREAM: data.StreamFailure,
}

_PREFIXES: typing.Final[dict[data.Stage, str]] = {
    data.Stage.ACQUISITION: "An error occurred while acquiring a connection",
    data.Stage.CURSOR_CREATION: "An error occurred while opening a cursor",
    data.Stage.STREAM: "An error occurred while fetching rows",
}


def format_error(e: BaseException, /, *, stage: data.Stage) -> data.RowstreamError:
    if isinstance(e, data.RowstreamError):
        return e

    error_type = _ERROR_TYPES[stage]
    prefix = _PREFIXES[stage]

    if isinstance(e, psycopg.Error):
        message = e.diag.message_primary or str(e)
        return error_type(f"{prefix}: {message}", sqlstate=e.sqlstate)

    if isinstance(e, sqlite3.Error):
        if error_name := getattr(e, "sqlite_errorname", None):
            return error_type(f"{prefix}: {e!s} ({error_name})")
        return error_type(f"{prefix}: {e!s}")

    if isinstance(e, TimeoutError):
        return error_type(f"{prefix}: timed out waiting for the pool.")

    return error_type(f"{prefix}: {e!s}")
