from metastore.database.inmemory.repo import InMemoryStore

__all__ = ["InMemoryStore"]
