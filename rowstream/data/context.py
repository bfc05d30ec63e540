from __future__ import annotations

import dataclasses
import typing

from rowstream.data.error import RowstreamError, Stage
from rowstream.data.pool import Pool
from rowstream.data.row import SqlParameters

__all__ = ("Context", "ErrorFormatter", "ParameterCheck")


class ParameterCheck(typing.Protocol):
    def __call__(self, params: SqlParameters | None, /) -> None: ...


class ErrorFormatter(typing.Protocol):
    def __call__(self, e: BaseException, /, *, stage: Stage) -> RowstreamError: ...


@dataclasses.dataclass(frozen=True, kw_only=True)
class Context:
    pool: Pool
    check_parameters: ParameterCheck
    format_error: ErrorFormatter
