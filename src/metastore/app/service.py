from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TypeVar

import pendulum
from pydantic import BaseModel

from metastore.app.accessor import MetaAccessor
from metastore.app.bulk import MetaBulk
from metastore.app.settings import DatabaseConfig, apply_env_overrides, load_database_config_from_file
from metastore.database.factory import build_database
from metastore.database.interfaces import Database

TConfigModel = TypeVar("TConfigModel", bound=BaseModel)

logger = logging.getLogger(__name__)


class MetaService:
    """Entry point wiring one accessor and one bulk coordinator over a configured store.

    ``meta`` covers single-key operations and ``metas`` the batched and cohort
    ones. Pass ``database`` to reuse an existing store instead of building one
    from ``database_config``.
    """

    def __init__(
        self,
        *,
        database_config: DatabaseConfig | dict[str, Any] | None = None,
        database: Database | None = None,
    ) -> None:
        if database_config is None:
            database_config = load_database_config_from_file()
        self.database_config = apply_env_overrides(self._validate_config(database_config, DatabaseConfig))
        self.database: Database = database or build_database(config=self.database_config)
        self.meta = MetaAccessor(
            self.database.meta_repo,
            large_value_bytes=self.database_config.analytics.large_value_bytes,
        )
        self.metas = MetaBulk(self.database.meta_repo, accessor=self.meta)
        logger.info(
            "Metastore ready: provider=%s entity_types=%s",
            self.database_config.metadata_store.provider,
            ",".join(self.database.entity_types),
        )

    @property
    def entity_types(self) -> tuple[str, ...]:
        return self.database.entity_types

    async def health(self) -> dict[str, Any]:
        """
        Lightweight readiness check.

        Reads one row from every meta table; never writes.
        """
        status: dict[str, Any] = {
            "ok": True,
            "timestamp": pendulum.now("UTC").isoformat(),
            "db": {
                "provider": self.database_config.metadata_store.provider,
                "ok": True,
            },
            "entity_types": list(self.entity_types),
        }
        try:
            self.database.meta_repo.ping()
        except Exception as exc:
            logger.warning("Metastore health check failed: %s", exc)
            status["ok"] = False
            status["db"]["ok"] = False
            status["error"] = str(exc)
        return status

    def close(self) -> None:
        self.database.close()

    @staticmethod
    def _validate_config(
        config: Mapping[str, Any] | BaseModel | None,
        model_type: type[TConfigModel],
    ) -> TConfigModel:
        if isinstance(config, model_type):
            return config
        if config is None:
            return model_type()
        return model_type.model_validate(config)


__all__ = ["MetaService"]
