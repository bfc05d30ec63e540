import functools
import os
import pathlib
import sys

from rowstream import data

__all__ = (
    "get_config_path",
    "get_log_folder",
)


@functools.lru_cache
def _root_dir() -> pathlib.Path:
    if getattr(sys, "frozen", False):
        path = pathlib.Path(os.path.dirname(sys.executable))

        if not path.exists():
            raise data.ConfigError(
                "os.path.dirname(sys.executable) returned an invalid path for a frozen executable."
            )

        return path
    else:
        try:
            return next(p for p in pathlib.Path(__file__).parents if (p / "rowstream").is_dir())
        except StopIteration:
            raise data.ConfigError(f"rowstream not found in path, {__file__}.")


@functools.lru_cache
def get_config_path() -> pathlib.Path:
    return _root_dir() / "assets" / "config.json"


@functools.lru_cache
def get_log_folder() -> pathlib.Path:
    folder = _root_dir() / "logs"
    folder.mkdir(exist_ok=True)
    return folder
