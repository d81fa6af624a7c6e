from __future__ import annotations

from typing import TYPE_CHECKING

from metastore.database.inmemory import InMemoryStore
from metastore.database.interfaces import Database

if TYPE_CHECKING:
    from metastore.app.settings import DatabaseConfig


def build_database(*, config: DatabaseConfig) -> Database:
    """Instantiate the metadata store selected by ``config.metadata_store.provider``."""
    store_config = config.metadata_store
    provider = store_config.provider
    if provider == "inmemory":
        return InMemoryStore(entity_types=config.entity_types)
    if not store_config.dsn:
        msg = f"metadata_store.dsn is required for provider {provider!r}"
        raise ValueError(msg)
    if provider == "sqlite":
        from metastore.database.sqlite import SQLiteStore

        return SQLiteStore(
            dsn=store_config.dsn,
            entity_types=config.entity_types,
            table_prefix=store_config.table_prefix,
        )
    if provider == "postgres":
        from metastore.database.postgres import PostgresStore

        return PostgresStore(
            dsn=store_config.dsn,
            ddl_mode=store_config.ddl_mode,
            entity_types=config.entity_types,
            table_prefix=store_config.table_prefix,
        )
    msg = f"Unsupported metadata store provider: {provider}"
    raise ValueError(msg)


__all__ = ["build_database"]
