from metastore.database.interfaces import Database
from metastore.database.models import DEFAULT_ENTITY_TYPES, Comparator
from metastore.database.repositories import MetaRepo

__all__ = ["Comparator", "DEFAULT_ENTITY_TYPES", "Database", "MetaRepo"]
