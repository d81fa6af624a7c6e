import json
import logging
import os
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, Field, ValidationError, field_validator

from metastore.database.models import DEFAULT_ENTITY_TYPES

logger = logging.getLogger(__name__)


def normalize_value(v: str) -> str:
    if isinstance(v, str):
        return v.strip().lower()
    return v


Normalize = BeforeValidator(normalize_value)


METASTORE_CONFIG_ENV = "METASTORE_CONFIG"
METASTORE_CONFIG_DEFAULT = Path("config") / "metastore.json"
METASTORE_DSN_ENV = "METASTORE_DSN"
DEFAULT_LARGE_VALUE_BYTES = 1048576


def resolve_metastore_config_path() -> Path:
    override = os.getenv(METASTORE_CONFIG_ENV)
    if override:
        return Path(override).expanduser()
    return Path(METASTORE_CONFIG_DEFAULT).expanduser()


def _load_json_file(path: Path) -> Any:
    if not path.exists():
        return None
    try:
        raw = path.read_text(encoding="utf-8")
        return json.loads(raw)
    except Exception as exc:
        logger.warning("Failed to load JSON config from %s: %s", path, exc)
        return None


class MetadataStoreConfig(BaseModel):
    provider: Annotated[Literal["inmemory", "postgres", "sqlite"], Normalize] = "inmemory"
    ddl_mode: Annotated[Literal["create", "validate"], Normalize] = "create"
    dsn: str | None = Field(default=None, description="Database connection string (required for postgres/sqlite).")
    table_prefix: str | None = Field(
        default=None,
        description="Meta table name prefix; backend default when unset ('meta_' for sqlite, none for postgres).",
    )


class AnalyticsConfig(BaseModel):
    large_value_bytes: int = Field(
        default=DEFAULT_LARGE_VALUE_BYTES,
        gt=0,
        description="Serialized size above which a value counts as large.",
    )


class DatabaseConfig(BaseModel):
    metadata_store: MetadataStoreConfig = Field(default_factory=MetadataStoreConfig)
    entity_types: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ENTITY_TYPES),
        description="Closed set of entity types; each gets its own meta namespace.",
    )
    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)

    @field_validator("entity_types", mode="before")
    @classmethod
    def normalize_entity_types(cls, value: Any) -> Any:
        if not isinstance(value, (list, tuple)):
            return value
        types: list[str] = []
        for item in value:
            name = normalize_value(item)
            if not isinstance(name, str) or not name:
                msg = f"Invalid entity type: {item!r}"
                raise ValueError(msg)
            if name not in types:
                types.append(name)
        if not types:
            msg = "At least one entity type is required"
            raise ValueError(msg)
        return types


def load_database_config_from_file() -> DatabaseConfig | None:
    """
    Load the database config from JSON.

    Supported:
    - config/metastore.json (default)
    - METASTORE_CONFIG override
    - METASTORE_DSN overrides metadata_store.dsn
    """
    path = resolve_metastore_config_path()
    data = _load_json_file(path)
    if data is None:
        return None
    if not isinstance(data, dict):
        logger.warning("metastore config must be an object: %s", path)
        return None
    raw = data.get("database", data)
    try:
        config = DatabaseConfig.model_validate(raw)
    except ValidationError as exc:
        logger.warning("Invalid metastore config at %s: %s", path, exc)
        return None
    return apply_env_overrides(config)


def apply_env_overrides(config: DatabaseConfig) -> DatabaseConfig:
    dsn = os.getenv(METASTORE_DSN_ENV)
    if not dsn:
        return config
    store = config.metadata_store.model_copy(update={"dsn": dsn})
    return config.model_copy(update={"metadata_store": store})


__all__ = [
    "AnalyticsConfig",
    "DatabaseConfig",
    "MetadataStoreConfig",
    "apply_env_overrides",
    "load_database_config_from_file",
    "resolve_metastore_config_path",
]
