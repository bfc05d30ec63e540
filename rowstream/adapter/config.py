import json
import pathlib
import typing

import pydantic

from rowstream import data

__all__ = ("load",)

_DEFAULT_MAX_CONNECTIONS: typing.Final[int] = 5
_DEFAULT_TIMEOUT_SECONDS: typing.Final[float] = 30.0


def load(*, config_file: pathlib.Path) -> data.Config:
    if not config_file.exists():
        raise data.ConfigError(
            f"The config file specified, {config_file.resolve()!s}, does not exist."
        )

    try:
        with config_file.open("r") as fh:
            d = typing.cast(dict[str, typing.Any], json.load(fh))
    except json.JSONDecodeError as e:
        raise data.ConfigError(f"The config file, {config_file!s}, is not valid json: {e!s}") from e

    if not isinstance(d, dict):
        raise data.ConfigError("The config file must contain a json object.")

    if "batch-size" not in d.keys():
        raise data.ConfigError("config file is missing an entry for 'batch-size'.")

    if "databases" not in d.keys():
        raise data.ConfigError("config file is missing an entry for 'databases'.")

    if not isinstance(d["databases"], list):
        raise data.ConfigError("config file entry 'databases' must be a list.")

    databases = tuple(_parse_database_dict(database_dict) for database_dict in d["databases"])

    db_ids = [db.db_id for db in databases]
    if duplicates := sorted({db_id for db_id in db_ids if db_ids.count(db_id) > 1}):
        raise data.ConfigError(f"database names must be unique, but found duplicates: {duplicates}.")

    try:
        return data.Config(batch_size=d["batch-size"], databases=databases)
    except pydantic.ValidationError as e:
        raise data.ConfigError(f"config file is invalid: {e!s}") from e


def _parse_database_dict(database_dict: dict[str, typing.Any], /) -> data.DbConfig:
    if not isinstance(database_dict, dict):
        raise data.ConfigError("database entries in the config file must be json objects.")

    if "name" not in database_dict.keys():
        raise data.ConfigError("database entry in config file is missing an entry for 'name'.")

    name: typing.Final[str] = database_dict["name"]

    if "api" not in database_dict.keys():
        raise data.ConfigError("database entry in config file is missing an entry for 'api'.")

    try:
        api: typing.Final[data.API] = data.API(database_dict["api"])
    except ValueError as e:
        raise data.UnrecognizedDatabaseAPI(api=database_dict["api"]) from e

    if "host" not in database_dict.keys():
        raise data.ConfigError("database entry in config file is missing an entry for 'host'.")

    host: typing.Final[str | None] = database_dict["host"]

    if "db-name" not in database_dict.keys():
        raise data.ConfigError("database entry in config file is missing an entry for 'db-name'.")

    db_name: typing.Final[str | None] = database_dict["db-name"]

    if "keyring-db-username-entry" not in database_dict.keys():
        raise data.ConfigError(
            "database entry in config file is missing an entry for 'keyring-db-username-entry'."
        )

    keyring_db_username_entry: typing.Final[str | None] = database_dict["keyring-db-username-entry"]

    if "keyring-db-password-entry" not in database_dict.keys():
        raise data.ConfigError(
            "database entry in config file is missing an entry for 'keyring-db-password-entry'."
        )

    keyring_db_password_entry: typing.Final[str | None] = database_dict["keyring-db-password-entry"]

    if "connection-string" not in database_dict.keys():
        raise data.ConfigError(
            "database entry in config file is missing an entry for 'connection-string'."
        )

    connection_string: typing.Final[str | None] = database_dict["connection-string"]

    if connection_string is None:
        if api == data.API.SQLITE:
            raise data.ConfigError(
                f"The sqlite database, {name}, requires a connection-string (the database file path)."
            )

        if (
            host is None
            or db_name is None
            or keyring_db_username_entry is None
            or keyring_db_password_entry is None
        ):
            raise data.ConfigError(
                "If connection-string is null, then host, db-name, keyring-db-username-entry, and "
                "keyring-db-password-entry must be provided."
            )

    max_connections = database_dict.get("max-connections", _DEFAULT_MAX_CONNECTIONS)
    timeout_seconds = database_dict.get("timeout-seconds", _DEFAULT_TIMEOUT_SECONDS)

    try:
        return data.DbConfig(
            db_id=name,
            api=api,
            host=host,
            db_name=db_name,
            keyring_db_username_entry=keyring_db_username_entry,
            keyring_db_password_entry=keyring_db_password_entry,
            connection_string=None if connection_string is None else pydantic.SecretStr(connection_string),
            max_connections=max_connections,
            timeout_seconds=float(timeout_seconds),
        )
    except (pydantic.ValidationError, TypeError, ValueError) as e:
        raise data.ConfigError(f"An error occurred while parsing database {name!r}: {e!s}") from e
