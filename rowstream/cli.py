import argparse
import asyncio
import pathlib
import sys
import typing

import pydantic
from loguru import logger

from rowstream import adapter, data, service

__all__ = ("main",)


@pydantic.dataclasses.dataclass(frozen=True, kw_only=True)
class QueryArgs:
    db: str
    sql: str
    params: tuple[str, ...] | None
    limit: pydantic.PositiveInt | None
    config_file: pathlib.Path


def parse_args(args: argparse.Namespace, /) -> QueryArgs:
    match cmd := args.command:
        case "query":
            if not args.db:
                raise data.ConfigError("--db is required.")

            if not args.sql:
                raise data.ConfigError("--sql is required.")

            if args.config:
                config_file = pathlib.Path(args.config)
            else:
                config_file = adapter.fs.get_config_path()

            return QueryArgs(
                db=args.db,
                sql=args.sql,
                params=tuple(args.param) if args.param else None,
                limit=args.limit,
                config_file=config_file,
            )
        case _:
            raise data.ConfigError(f"Unrecognized command, {cmd!r}.")


async def _query(*, query_args: QueryArgs, fh: typing.TextIO) -> int:
    cfg = adapter.config.load(config_file=query_args.config_file)

    db_config = cfg.db(query_args.db)
    if db_config is None:
        raise data.ConfigError(f"The database, {query_args.db!r}, was not found in the config file.")

    context = adapter.create_context_for(db_config=db_config, batch_size=cfg.batch_size)
    try:
        async with service.CursorProvider(context=context) as provider:
            rows_written = await service.export_rows(
                provider=provider,
                sql=query_args.sql,
                params=query_args.params,
                fh=fh,
                limit=query_args.limit,
            )
    finally:
        await context.pool.close()

    logger.info(f"Wrote {rows_written} rows.")

    return rows_written


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rowstream")
    subparser = parser.add_subparsers(dest="command", required=True)

    query_parser = subparser.add_parser("query")
    query_parser.add_argument("--db", type=str, required=True)
    query_parser.add_argument("--sql", type=str, required=True)
    query_parser.add_argument("--param", action="append", type=str)
    query_parser.add_argument("--limit", type=int)
    query_parser.add_argument("--config", type=str)

    return parser


def main(argv: typing.Sequence[str] | None = None) -> None:
    try:
        if not getattr(sys, "frozen", False):
            logger.remove()
            logger.add(sys.stderr, level="INFO")

        logger.add(adapter.fs.get_log_folder() / "error.log", rotation="5 MB", retention="7 days", level="ERROR")

        args = _build_parser().parse_args(sys.argv[1:] if argv is None else argv)

        asyncio.run(_query(query_args=parse_args(args), fh=sys.stdout))

        logger.info("Done.")
    except data.RowstreamError as e:
        logger.error(str(e))
        sys.exit(1)
    except Exception as e:
        logger.exception(e)
        sys.exit(1)


if __name__ == "__main__":
    main()
