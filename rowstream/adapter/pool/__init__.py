from rowstream.adapter.pool.pg import PgConnection, PgPool
from rowstream.adapter.pool.sqlite import SqliteConnection, SqlitePool
from rowstream.adapter.pool.strategy import create

__all__ = (
    "PgConnection",
    "PgPool",
    "SqliteConnection",
    "SqlitePool",
    "create",
)
