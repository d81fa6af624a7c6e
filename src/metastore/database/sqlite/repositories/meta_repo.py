from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from metastore.database.repositories.sql_meta import SQLMetaRepoBase
from metastore.database.sqlite.session import SQLiteSessionManager


class SQLiteMetaRepo(SQLMetaRepoBase):
    """Meta repository over per-entity-type SQLite tables.

    SQLite's ``CAST(text AS REAL)`` reads the leading numeric prefix and yields
    0.0 otherwise, so numeric comparisons use the shared cast unchanged.
    """

    def __init__(
        self,
        *,
        meta_models: Mapping[str, type[Any]],
        sessions: SQLiteSessionManager,
        entity_types: Iterable[str],
    ) -> None:
        super().__init__(meta_models=meta_models, sessions=sessions, entity_types=entity_types)


__all__ = ["SQLiteMetaRepo"]
