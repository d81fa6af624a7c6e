"""Query logic shared by the SQL-backed meta repositories.

Each entity type owns one table built from the backend's meta model. A table row
holds the JSON encoding of the value (``value_json``, the source of truth for
reads) and its text form (``meta_value``, what comparisons and ``LIKE`` see).
"""

from __future__ import annotations

import json
import logging
import operator
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from typing import Any

import pendulum
from sqlalchemy import Float, cast
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from metastore.database.models import Comparator, compares_numerically
from metastore.database.repositories.meta import MetaRepo
from metastore.values import ABSENT, serialize_value, to_text

logger = logging.getLogger(__name__)

_OPERATORS: dict[Comparator, Callable[[Any, Any], Any]] = {
    Comparator.EQ: operator.eq,
    Comparator.NE: operator.ne,
    Comparator.GT: operator.gt,
    Comparator.LT: operator.lt,
    Comparator.GE: operator.ge,
    Comparator.LE: operator.le,
}


class SQLMetaRepoBase(MetaRepo):
    def __init__(
        self,
        *,
        meta_models: Mapping[str, type[Any]],
        sessions: Any,
        entity_types: Iterable[str],
    ) -> None:
        self._meta_models = dict(meta_models)
        self._sessions = sessions
        self.entity_types = tuple(entity_types)

    @staticmethod
    def _now() -> datetime:
        return pendulum.now("UTC")

    def _model(self, entity_type: str) -> type[Any] | None:
        model = self._meta_models.get(entity_type)
        if model is None:
            logger.warning("Unknown entity type: %s", entity_type)
        return model

    @staticmethod
    def _decode(row: Any) -> Any:
        try:
            return json.loads(row.value_json)
        except (json.JSONDecodeError, TypeError) as exc:
            logger.warning("Failed to decode meta %s for object %s: %s", row.meta_key, row.object_id, exc)
            return row.meta_value

    def _numeric_column(self, model: type[Any]) -> Any:
        return cast(model.meta_value, Float)

    def _value_clause(self, model: type[Any], value: Any, comparator: Comparator) -> Any:
        if comparator is Comparator.LIKE:
            return model.meta_value.icontains(to_text(value), autoescape=True)
        compare = _OPERATORS[comparator]
        if compares_numerically(comparator, value):
            return compare(self._numeric_column(model), float(value))
        return compare(model.meta_value, to_text(value))

    def _rows(self, session: Any, model: type[Any], entity_id: int, key: str) -> list[Any]:
        stmt = select(model).where(model.object_id == entity_id, model.meta_key == key).order_by(model.meta_id)
        return list(session.exec(stmt).all())

    def get(self, entity_type: str, entity_id: int, key: str, single: bool = True) -> Any:
        model = self._model(entity_type)
        if model is None:
            return ABSENT if single else []
        try:
            with self._sessions.session() as session:
                values = [self._decode(row) for row in self._rows(session, model, entity_id, key)]
        except SQLAlchemyError as exc:
            logger.warning("Failed to read meta %s for %s %s: %s", key, entity_type, entity_id, exc)
            return ABSENT if single else []
        if single:
            return values[0] if values else ABSENT
        return values

    def get_all(self, entity_type: str, entity_id: int) -> dict[str, list[Any]]:
        model = self._model(entity_type)
        if model is None:
            return {}
        stmt = select(model).where(model.object_id == entity_id).order_by(model.meta_id)
        result: dict[str, list[Any]] = {}
        try:
            with self._sessions.session() as session:
                for row in session.exec(stmt).all():
                    result.setdefault(row.meta_key, []).append(self._decode(row))
        except SQLAlchemyError as exc:
            logger.warning("Failed to read meta for %s %s: %s", entity_type, entity_id, exc)
            return {}
        return result

    def set(self, entity_type: str, entity_id: int, key: str, value: Any) -> bool:
        model = self._model(entity_type)
        if model is None:
            return False
        try:
            payload = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            logger.warning("Meta value for %s is not serializable: %s", key, exc)
            return False
        text = serialize_value(value)
        now = self._now()
        try:
            with self._sessions.session() as session:
                rows = self._rows(session, model, entity_id, key)
                if not rows:
                    session.add(
                        model(object_id=entity_id, meta_key=key, meta_value=text, value_json=payload, updated_at=now)
                    )
                else:
                    row = rows[0]
                    row.meta_value = text
                    row.value_json = payload
                    row.updated_at = now
                    session.add(row)
                    for extra in rows[1:]:
                        session.delete(extra)
                session.commit()
        except SQLAlchemyError as exc:
            logger.warning("Failed to write meta %s for %s %s: %s", key, entity_type, entity_id, exc)
            return False
        return True

    def delete(self, entity_type: str, entity_id: int, key: str) -> bool:
        model = self._model(entity_type)
        if model is None:
            return False
        try:
            with self._sessions.session() as session:
                rows = self._rows(session, model, entity_id, key)
                for row in rows:
                    session.delete(row)
                session.commit()
        except SQLAlchemyError as exc:
            logger.warning("Failed to delete meta %s for %s %s: %s", key, entity_type, entity_id, exc)
            return False
        return bool(rows)

    def distinct_keys_by_prefix(self, entity_type: str, prefix: str) -> list[str]:
        model = self._model(entity_type)
        if model is None:
            return []
        stmt = select(model.meta_key).distinct().where(model.meta_key.startswith(prefix, autoescape=True))
        try:
            with self._sessions.session() as session:
                keys = list(session.exec(stmt).all())
        except SQLAlchemyError as exc:
            logger.warning("Failed to scan %s meta keys by prefix %r: %s", entity_type, prefix, exc)
            return []
        # LIKE may fold case depending on the backend; prefixes are case-sensitive.
        return sorted(key for key in keys if key.startswith(prefix))

    def delete_rows_by_key(self, entity_type: str, key: str) -> int:
        model = self._model(entity_type)
        if model is None:
            return 0
        try:
            with self._sessions.session() as session:
                rows = list(session.exec(select(model).where(model.meta_key == key)).all())
                for row in rows:
                    session.delete(row)
                session.commit()
        except SQLAlchemyError as exc:
            logger.warning("Failed to delete %s meta rows for key %s: %s", entity_type, key, exc)
            return 0
        return len(rows)

    def find_ids(self, entity_type: str, key: str, value: Any, comparator: Comparator) -> list[int]:
        model = self._model(entity_type)
        if model is None:
            return []
        stmt = (
            select(model.object_id)
            .distinct()
            .where(model.meta_key == key, self._value_clause(model, value, comparator))
            .order_by(model.object_id)
        )
        try:
            with self._sessions.session() as session:
                return [int(object_id) for object_id in session.exec(stmt).all()]
        except SQLAlchemyError as exc:
            logger.warning("Failed to search %s meta %s %s %r: %s", entity_type, key, comparator.value, value, exc)
            return []

    def ping(self) -> None:
        """Touch every meta table; errors propagate so readiness checks can report them."""
        with self._sessions.session() as session:
            for model in self._meta_models.values():
                session.exec(select(model.meta_id).limit(1)).first()

    def serialize(self, value: Any) -> str:
        return serialize_value(value)


__all__ = ["SQLMetaRepoBase"]
