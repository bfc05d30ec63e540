from rowstream import data
from rowstream.adapter import pool as pool_factory
from rowstream.adapter.check import check_parameters
from rowstream.adapter.error_format import format_error

__all__ = ("create_context", "create_context_for")


def create_context(*, pool: data.Pool) -> data.Context:
    return data.Context(
        pool=pool,
        check_parameters=check_parameters,
        format_error=format_error,
    )


def create_context_for(*, db_config: data.DbConfig, batch_size: int) -> data.Context:
    return create_context(pool=pool_factory.create(db_config=db_config, batch_size=batch_size))
