"""SQLAlchemy schema definitions for SQLite backend."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from sqlalchemy import MetaData
from sqlmodel import SQLModel

from metastore.database.sqlite.models import build_sqlite_meta_model


@dataclass
class SQLiteSQLAModels:
    """Container for SQLite SQLAlchemy/SQLModel models."""

    Base: type[Any]
    Meta: dict[str, type[Any]]


_MODEL_CACHE: dict[tuple[tuple[str, ...], str], SQLiteSQLAModels] = {}


def get_sqlite_sqlalchemy_models(
    *,
    entity_types: Iterable[str],
    table_prefix: str = "meta_",
) -> SQLiteSQLAModels:
    """Build (and cache) one meta table model per entity type.

    Args:
        entity_types: Namespaces to create tables for.
        table_prefix: Prefix for table names (avoid reserved "sqlite_").

    Returns:
        SQLiteSQLAModels with the shared metadata base and a model per entity type.
    """
    types = tuple(entity_types)
    cache_key = (types, table_prefix)
    cached = _MODEL_CACHE.get(cache_key)
    if cached:
        return cached

    metadata_obj = MetaData()

    def _tbl(name: str) -> str:
        return f"{table_prefix}{name}meta" if table_prefix else f"{name}meta"

    meta_models = {
        entity_type: build_sqlite_meta_model(entity_type, tablename=_tbl(entity_type), metadata=metadata_obj)
        for entity_type in types
    }

    class SQLiteBase(SQLModel):
        __abstract__ = True
        metadata = metadata_obj

    models = SQLiteSQLAModels(Base=SQLiteBase, Meta=meta_models)
    _MODEL_CACHE[cache_key] = models
    return models


__all__ = ["SQLiteSQLAModels", "get_sqlite_sqlalchemy_models"]
