from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

try:
    from sqlmodel import SQLModel
except ImportError as exc:
    msg = "sqlmodel is required for Postgres storage support"
    raise ImportError(msg) from exc

try:
    from sqlalchemy import MetaData
except ImportError as exc:
    msg = "sqlalchemy is required for Postgres storage support"
    raise ImportError(msg) from exc

from metastore.database.postgres.models import build_meta_model


@dataclass
class SQLAModels:
    Base: type[Any]
    Meta: dict[str, type[Any]]


_MODEL_CACHE: dict[tuple[tuple[str, ...], str], SQLAModels] = {}


def get_sqlalchemy_models(*, entity_types: Iterable[str], table_prefix: str = "") -> SQLAModels:
    """
    Build (and cache) SQLModel ORM models for Postgres storage.
    """
    types = tuple(entity_types)
    cache_key = (types, table_prefix)
    cached = _MODEL_CACHE.get(cache_key)
    if cached:
        return cached

    metadata_obj = MetaData()
    meta_models = {
        entity_type: build_meta_model(entity_type, tablename=f"{table_prefix}{entity_type}meta", metadata=metadata_obj)
        for entity_type in types
    }

    class Base(SQLModel):
        __abstract__ = True
        metadata = metadata_obj

    models = SQLAModels(Base=Base, Meta=meta_models)
    _MODEL_CACHE[cache_key] = models
    return models


__all__ = ["SQLAModels", "get_sqlalchemy_models"]
