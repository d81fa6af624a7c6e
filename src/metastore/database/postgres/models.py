from __future__ import annotations

from datetime import datetime
from typing import Any

import pendulum
from sqlalchemy import BigInteger, MetaData, String, Text
from sqlmodel import DateTime, Field, Index, SQLModel


class TZDateTime(DateTime):
    def __init__(self, timezone: bool = True, **kw: Any) -> None:
        super().__init__(timezone=timezone, **kw)


class MetaModel(SQLModel):
    meta_id: int | None = Field(default=None, primary_key=True, sa_type=BigInteger)
    object_id: int = Field(index=True, sa_type=BigInteger)
    meta_key: str = Field(sa_type=String(255), index=True)
    meta_value: str = Field(default="", sa_type=Text)
    value_json: str = Field(default='""', sa_type=Text)
    updated_at: datetime = Field(
        default_factory=lambda: pendulum.now("UTC"),
        sa_type=TZDateTime,
    )


def build_meta_model(
    entity_type: str,
    *,
    tablename: str,
    metadata: MetaData | None = None,
    core_model: type[SQLModel] = MetaModel,
) -> type[SQLModel]:
    table_attrs: dict[str, Any] = {
        "__module__": core_model.__module__,
        "__tablename__": tablename,
        "__table_args__": (Index(f"ix_{tablename}__object_key", "object_id", "meta_key"),),
    }
    if metadata is not None:
        table_attrs["metadata"] = metadata
    token = "".join(part.capitalize() for part in tablename.split("_") if part)
    return type(f"{token}{core_model.__name__}Table", (core_model,), table_attrs, table=True)


__all__ = ["MetaModel", "TZDateTime", "build_meta_model"]
