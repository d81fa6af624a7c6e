from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy import Float, case, cast, literal

from metastore.database.postgres.session import SessionManager
from metastore.database.repositories.sql_meta import SQLMetaRepoBase

_NUMERIC_TEXT = r"^\s*[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?\s*$"


class PostgresMetaRepo(SQLMetaRepoBase):
    def __init__(
        self,
        *,
        meta_models: Mapping[str, type[Any]],
        sessions: SessionManager,
        entity_types: Iterable[str],
    ) -> None:
        super().__init__(meta_models=meta_models, sessions=sessions, entity_types=entity_types)

    def _numeric_column(self, model: type[Any]) -> Any:
        # Postgres rejects CAST on non-numeric text; those rows compare as 0.
        return case(
            (model.meta_value.op("~")(_NUMERIC_TEXT), cast(model.meta_value, Float)),
            else_=literal(0.0),
        )


__all__ = ["PostgresMetaRepo"]
