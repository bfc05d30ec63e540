import datetime
import decimal
import typing
import uuid

from rowstream import data

__all__ = ("check_parameters", "parameter_errors")

_SUPPORTED_TYPES: typing.Final[tuple[type, ...]] = (
    bool,
    int,
    float,
    decimal.Decimal,
    str,
    bytes,
    datetime.date,
    datetime.datetime,
    datetime.time,
    uuid.UUID,
)


def check_parameters(params: data.SqlParameters | None, /) -> None:
    if errors := parameter_errors(params):
        raise data.InvalidParameters(errors=errors)


def parameter_errors(params: typing.Any, /) -> list[str]:
    if params is None:
        return []

    errors: list[str] = []

    if isinstance(params, typing.Mapping):
        for key, value in params.items():
            if not isinstance(key, str):
                errors.append(f"Parameter names must be strings, but got {key!r}.")

            if error := _value_error(value, position=key):
                errors.append(error)
    elif isinstance(params, typing.Sequence) and not isinstance(params, (str, bytes)):
        for ix, value in enumerate(params):
            if error := _value_error(value, position=ix):
                errors.append(error)
    else:
        errors.append(
            f"Parameters must be a sequence or a mapping, but got {type(params).__name__}."
        )

    return errors


def _value_error(value: typing.Any, /, *, position: typing.Hashable) -> str | None:
    if value is None or isinstance(value, _SUPPORTED_TYPES):
        return None

    return f"The parameter at {position!r} has an unsupported type, {type(value).__name__}."
