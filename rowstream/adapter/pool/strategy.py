from rowstream import data
from rowstream.adapter.pool.pg import PgPool
from rowstream.adapter.pool.sqlite import SqlitePool

__all__ = ("create",)


def create(*, db_config: data.DbConfig, batch_size: int) -> data.Pool:
    match db_config.api:
        case data.API.PSYCOPG:
            return PgPool(db_config=db_config, batch_size=batch_size)
        case data.API.SQLITE:
            if db_config.connection_string is None:
                raise data.ConfigError(
                    f"The sqlite database, {db_config.db_id}, requires a connection string."
                )

            return SqlitePool(
                database=db_config.connection_string.get_secret_value(),
                batch_size=batch_size,
                max_connections=db_config.max_connections,
                timeout_seconds=db_config.timeout_seconds,
            )
        case _:
            raise data.UnrecognizedDatabaseAPI(api=str(db_config.api))
