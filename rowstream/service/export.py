import json
import typing

from loguru import logger

from rowstream import data
from rowstream.service.cursor_provider import CursorProvider

__all__ = ("export_rows",)


async def export_rows(
    *,
    provider: CursorProvider,
    sql: str,
    params: data.SqlParameters | None,
    fh: typing.TextIO,
    limit: int | None = None,
) -> int:
    if limit is not None and limit < 1:
        raise ValueError(f"limit must be a positive integer, but got {limit!r}.")

    rows_written = 0
    async with await provider.open(sql, params) as cursor:
        async for row in cursor:
            fh.write(json.dumps(dict(row), default=str) + "\n")
            rows_written += 1

            if limit is not None and rows_written >= limit:
                logger.info(f"Stopping after {rows_written} rows (limit reached).")
                break

    return rows_written
