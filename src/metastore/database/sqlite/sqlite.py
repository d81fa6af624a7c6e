"""SQLite database store implementation for metastore."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import inspect

from metastore.database.interfaces import Database
from metastore.database.models import DEFAULT_ENTITY_TYPES
from metastore.database.repositories import MetaRepo
from metastore.database.sqlite.repositories.meta_repo import SQLiteMetaRepo
from metastore.database.sqlite.schema import SQLiteSQLAModels, get_sqlite_sqlalchemy_models
from metastore.database.sqlite.session import SQLiteSessionManager

logger = logging.getLogger(__name__)


class SQLiteStore(Database):
    """SQLite database store implementation.

    This store provides a lightweight, file-based backend. Every entity type gets
    its own meta table (``<prefix><type>meta``) holding one row per attribute.

    Attributes:
        meta_repo: Repository for per-entity metadata.
        entity_types: Entity types with a backing table.
    """

    meta_repo: MetaRepo
    entity_types: tuple[str, ...]

    def __init__(
        self,
        *,
        dsn: str,
        entity_types: Iterable[str] | None = None,
        table_prefix: str | None = None,
        sqla_models: SQLiteSQLAModels | None = None,
    ) -> None:
        """Initialize SQLite database store.

        Args:
            dsn: SQLite connection string (e.g., "sqlite:///path/to/db.sqlite").
            entity_types: Entity types to create meta tables for.
            table_prefix: Table name prefix; resolved from existing tables when omitted.
            sqla_models: Pre-built SQLAlchemy models container.
        """
        self.dsn = dsn
        self.entity_types = tuple(entity_types or DEFAULT_ENTITY_TYPES)
        self._sessions = SQLiteSessionManager(dsn=self.dsn)
        prefix = table_prefix if table_prefix is not None else self._resolve_table_prefix()
        self._sqla_models: SQLiteSQLAModels = sqla_models or get_sqlite_sqlalchemy_models(
            entity_types=self.entity_types,
            table_prefix=prefix,
        )

        self._create_tables()

        self.meta_repo = SQLiteMetaRepo(
            meta_models=self._sqla_models.Meta,
            sessions=self._sessions,
            entity_types=self.entity_types,
        )

    def _create_tables(self) -> None:
        """Create SQLite tables if they don't exist."""
        self._sqla_models.Base.metadata.create_all(self._sessions.engine)
        logger.debug("SQLite meta tables created/verified: %s", ", ".join(self.entity_types))

    def _resolve_table_prefix(self) -> str:
        """
        Choose SQLite table prefix.

        Reuse the prefix of existing ``*meta`` tables when a single one is found;
        otherwise use "meta_".
        """
        try:
            names = set(inspect(self._sessions.engine).get_table_names())
        except Exception as exc:
            logger.warning("Failed to inspect sqlite tables: %s", exc)
            return "meta_"
        prefixes = {
            name[: -len(f"{entity_type}meta")]
            for name in names
            for entity_type in self.entity_types
            if name.endswith(f"{entity_type}meta")
        }
        if len(prefixes) == 1:
            return prefixes.pop()
        return "meta_"

    def close(self) -> None:
        """Close the database connection and release resources."""
        self._sessions.close()


__all__ = ["SQLiteStore"]
