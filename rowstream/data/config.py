import pydantic

from rowstream.data.db_config import DbConfig

__all__ = ("Config",)


@pydantic.dataclasses.dataclass(frozen=True, kw_only=True)
class Config:
    batch_size: pydantic.PositiveInt
    databases: tuple[DbConfig, ...]

    def db(self, /, db_id: str) -> DbConfig | None:
        return next((db for db in self.databases if db.db_id == db_id), None)

    def __repr__(self) -> str:
        return f"Config(batch_size={self.batch_size}, databases={self.databases})"
