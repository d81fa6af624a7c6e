from metastore.app import DatabaseConfig, MetaAccessor, MetaBulk, MetaService
from metastore.database.models import Comparator
from metastore.values import ABSENT, CastKind

__all__ = ["ABSENT", "CastKind", "Comparator", "DatabaseConfig", "MetaAccessor", "MetaBulk", "MetaService"]
