from metastore.database.postgres.repositories.meta_repo import PostgresMetaRepo

__all__ = ["PostgresMetaRepo"]
