from metastore.app.accessor import MetaAccessor
from metastore.app.bulk import MetaBulk
from metastore.app.service import MetaService
from metastore.app.settings import (
    AnalyticsConfig,
    DatabaseConfig,
    MetadataStoreConfig,
    load_database_config_from_file,
    resolve_metastore_config_path,
)

__all__ = [
    "AnalyticsConfig",
    "DatabaseConfig",
    "MetaAccessor",
    "MetaBulk",
    "MetaService",
    "MetadataStoreConfig",
    "load_database_config_from_file",
    "resolve_metastore_config_path",
]
