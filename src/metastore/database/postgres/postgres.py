from __future__ import annotations

import logging
from collections.abc import Iterable

from metastore.database.interfaces import Database
from metastore.database.models import DEFAULT_ENTITY_TYPES
from metastore.database.postgres.migration import DDLMode, run_migrations
from metastore.database.postgres.repositories.meta_repo import PostgresMetaRepo
from metastore.database.postgres.schema import SQLAModels, get_sqlalchemy_models
from metastore.database.postgres.session import SessionManager
from metastore.database.repositories import MetaRepo

logger = logging.getLogger(__name__)


class PostgresStore(Database):
    meta_repo: MetaRepo
    entity_types: tuple[str, ...]

    def __init__(
        self,
        *,
        dsn: str,
        ddl_mode: DDLMode = "create",
        entity_types: Iterable[str] | None = None,
        table_prefix: str | None = None,
        sqla_models: SQLAModels | None = None,
    ) -> None:
        self.dsn = dsn
        self.ddl_mode = ddl_mode
        self.entity_types = tuple(entity_types or DEFAULT_ENTITY_TYPES)
        self._sessions = SessionManager(dsn=self.dsn)
        self._sqla_models: SQLAModels = sqla_models or get_sqlalchemy_models(
            entity_types=self.entity_types,
            table_prefix=table_prefix or "",
        )
        run_migrations(engine=self._sessions.engine, metadata=self._sqla_models.Base.metadata, ddl_mode=self.ddl_mode)

        self.meta_repo = PostgresMetaRepo(
            meta_models=self._sqla_models.Meta,
            sessions=self._sessions,
            entity_types=self.entity_types,
        )

    def close(self) -> None:
        self._sessions.close()


__all__ = ["PostgresStore"]
