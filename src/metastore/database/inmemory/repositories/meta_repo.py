from __future__ import annotations

import copy
import logging
from typing import Any

from metastore.database.models import Comparator, matches
from metastore.database.repositories.meta import MetaRepo
from metastore.database.state import DatabaseState
from metastore.values import ABSENT, serialize_value

logger = logging.getLogger(__name__)


class InMemoryMetaRepository(MetaRepo):
    def __init__(self, *, state: DatabaseState) -> None:
        self._state = state
        self.meta = self._state.meta
        self.entity_types = self._state.entity_types

    def _namespace(self, entity_type: str) -> dict[int, dict[str, list[Any]]] | None:
        namespace = self.meta.get(entity_type)
        if namespace is None:
            logger.warning("Unknown entity type: %s", entity_type)
        return namespace

    def get(self, entity_type: str, entity_id: int, key: str, single: bool = True) -> Any:
        namespace = self._namespace(entity_type)
        values = (namespace or {}).get(entity_id, {}).get(key, [])
        if single:
            return copy.deepcopy(values[0]) if values else ABSENT
        return copy.deepcopy(values)

    def get_all(self, entity_type: str, entity_id: int) -> dict[str, list[Any]]:
        namespace = self._namespace(entity_type)
        return copy.deepcopy((namespace or {}).get(entity_id, {}))

    def set(self, entity_type: str, entity_id: int, key: str, value: Any) -> bool:
        namespace = self._namespace(entity_type)
        if namespace is None:
            return False
        namespace.setdefault(entity_id, {})[key] = [copy.deepcopy(value)]
        return True

    def delete(self, entity_type: str, entity_id: int, key: str) -> bool:
        namespace = self._namespace(entity_type)
        attributes = (namespace or {}).get(entity_id)
        if not attributes or key not in attributes:
            return False
        del attributes[key]
        return True

    def distinct_keys_by_prefix(self, entity_type: str, prefix: str) -> list[str]:
        namespace = self._namespace(entity_type) or {}
        keys = {key for attributes in namespace.values() for key in attributes if key.startswith(prefix)}
        return sorted(keys)

    def delete_rows_by_key(self, entity_type: str, key: str) -> int:
        namespace = self._namespace(entity_type) or {}
        removed = 0
        for attributes in namespace.values():
            values = attributes.pop(key, None)
            if values is not None:
                removed += len(values)
        return removed

    def find_ids(self, entity_type: str, key: str, value: Any, comparator: Comparator) -> list[int]:
        namespace = self._namespace(entity_type) or {}
        found = {
            entity_id
            for entity_id, attributes in namespace.items()
            if any(matches(stored, value, comparator) for stored in attributes.get(key, []))
        }
        return sorted(found)

    def ping(self) -> None:
        return None

    def serialize(self, value: Any) -> str:
        return serialize_value(value)


__all__ = ["InMemoryMetaRepository"]
