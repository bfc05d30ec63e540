import typing

__all__ = ("Row", "SqlParameters")

Row = typing.Mapping[str, typing.Any]

SqlParameters = typing.Sequence[typing.Any] | typing.Mapping[str, typing.Any]
