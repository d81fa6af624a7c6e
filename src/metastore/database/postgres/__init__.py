from metastore.database.postgres.postgres import PostgresStore

__all__ = ["PostgresStore"]
