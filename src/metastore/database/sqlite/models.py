"""SQLite-specific models for metastore tables."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import pendulum
from sqlalchemy import MetaData, String, Text
from sqlmodel import DateTime, Field, Index, SQLModel

logger = logging.getLogger(__name__)


class TZDateTime(DateTime):
    """DateTime type with timezone support."""

    def __init__(self, timezone: bool = True, **kw: Any) -> None:
        super().__init__(timezone=timezone, **kw)


class SQLiteMetaModel(SQLModel):
    """Row of a per-entity-type meta table."""

    meta_id: int | None = Field(default=None, primary_key=True)
    object_id: int = Field(index=True)
    meta_key: str = Field(sa_type=String(255), index=True)
    meta_value: str = Field(default="", sa_type=Text)
    value_json: str = Field(default='""', sa_type=Text)
    updated_at: datetime = Field(
        default_factory=lambda: pendulum.now("UTC"),
        sa_type=TZDateTime,
    )


def _class_token(name: str) -> str:
    return "".join(part.capitalize() for part in name.replace("-", "_").split("_") if part)


def build_sqlite_meta_model(
    entity_type: str,
    *,
    tablename: str,
    metadata: MetaData | None = None,
    core_model: type[SQLModel] = SQLiteMetaModel,
) -> type[SQLModel]:
    """Build the meta table model for one entity type."""
    table_args = (Index(f"ix_{tablename}__object_key", "object_id", "meta_key"),)
    table_attrs: dict[str, Any] = {
        "__module__": core_model.__module__,
        "__tablename__": tablename,
        "__table_args__": table_args,
    }
    if metadata is not None:
        table_attrs["metadata"] = metadata
    logger.debug("Building meta model for %s -> %s", entity_type, tablename)
    return type(
        f"{_class_token(tablename)}{core_model.__name__}Table",
        (core_model,),
        table_attrs,
        table=True,
    )


__all__ = ["SQLiteMetaModel", "TZDateTime", "build_sqlite_meta_model"]
