"""SQLite repository implementations for metastore."""

from metastore.database.sqlite.repositories.meta_repo import SQLiteMetaRepo

__all__ = ["SQLiteMetaRepo"]
