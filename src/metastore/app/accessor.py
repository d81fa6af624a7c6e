from __future__ import annotations

import json
import logging
from typing import Any

from metastore.database.repositories import MetaRepo
from metastore.values import (
    ABSENT,
    CastKind,
    cast_value,
    get_path,
    is_absent,
    remove_path,
    set_path,
    strict_equals,
    strict_index,
    to_bool,
    to_int,
    type_name,
    unique_values,
)

logger = logging.getLogger(__name__)

DEFAULT_SIZE_LIMIT = 1048576


def require_entity_type(entity_type: str) -> None:
    if not entity_type:
        msg = "entity_type is required"
        raise ValueError(msg)


class MetaAccessor:
    """Single-entity, single-key operations over an injected meta repository.

    Absence is never an error: reads return ``None`` (or the caller default),
    failed writes return ``False`` or ``None`` depending on the operation.
    """

    def __init__(self, repo: MetaRepo, *, large_value_bytes: int = DEFAULT_SIZE_LIMIT) -> None:
        self.repo = repo
        self.large_value_bytes = large_value_bytes

    def _raw(self, entity_type: str, entity_id: int, key: str) -> Any:
        require_entity_type(entity_type)
        return self.repo.get(entity_type, entity_id, key, True)

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    def exists(self, entity_type: str, entity_id: int, key: str) -> bool:
        return not is_absent(self._raw(entity_type, entity_id, key))

    def get(self, entity_type: str, entity_id: int, key: str, single: bool = True) -> Any:
        require_entity_type(entity_type)
        value = self.repo.get(entity_type, entity_id, key, single)
        if single:
            return None if is_absent(value) else value
        return value or None

    def get_with_default(self, entity_type: str, entity_id: int, key: str, default: Any) -> Any:
        value = self._raw(entity_type, entity_id, key)
        return default if is_absent(value) else value

    def get_cast(
        self,
        entity_type: str,
        entity_id: int,
        key: str,
        cast_kind: CastKind | str,
        default: Any = None,
    ) -> Any:
        value = self._raw(entity_type, entity_id, key)
        if is_absent(value):
            return cast_value(default, cast_kind)
        return cast_value(value, cast_kind)

    def update(self, entity_type: str, entity_id: int, key: str, value: Any) -> bool:
        require_entity_type(entity_type)
        return self.repo.set(entity_type, entity_id, key, value)

    def update_if_changed(self, entity_type: str, entity_id: int, key: str, value: Any) -> bool:
        current = self._raw(entity_type, entity_id, key)
        if strict_equals(current, value):
            return False
        return self.repo.set(entity_type, entity_id, key, value)

    def delete(self, entity_type: str, entity_id: int, key: str) -> bool:
        require_entity_type(entity_type)
        if not entity_id or entity_id < 0:
            return False
        return self.repo.delete(entity_type, entity_id, key)

    # ------------------------------------------------------------------
    # Numeric
    # ------------------------------------------------------------------

    def increment(self, entity_type: str, entity_id: int, key: str, amount: int = 1) -> int | None:
        new_value = to_int(self._raw(entity_type, entity_id, key)) + amount
        return new_value if self.repo.set(entity_type, entity_id, key, new_value) else None

    def decrement(self, entity_type: str, entity_id: int, key: str, amount: int = 1) -> int | None:
        new_value = to_int(self._raw(entity_type, entity_id, key)) - abs(amount)
        return new_value if self.repo.set(entity_type, entity_id, key, new_value) else None

    # ------------------------------------------------------------------
    # Arrays (strict, type-aware equality)
    # ------------------------------------------------------------------

    def _list(self, entity_type: str, entity_id: int, key: str) -> list[Any] | None:
        value = self._raw(entity_type, entity_id, key)
        return value if isinstance(value, list) else None

    def array_contains(self, entity_type: str, entity_id: int, key: str, value: Any) -> bool:
        items = self._list(entity_type, entity_id, key)
        return items is not None and strict_index(items, value) != -1

    def array_append(self, entity_type: str, entity_id: int, key: str, value: Any) -> bool:
        items = self._list(entity_type, entity_id, key) or []
        return self.repo.set(entity_type, entity_id, key, [*items, value])

    def array_remove(self, entity_type: str, entity_id: int, key: str, value: Any) -> bool:
        items = self._list(entity_type, entity_id, key)
        if items is None:
            return False
        idx = strict_index(items, value)
        if idx == -1:
            return False
        return self.repo.set(entity_type, entity_id, key, items[:idx] + items[idx + 1 :])

    def array_remove_all(self, entity_type: str, entity_id: int, key: str, value: Any) -> bool:
        items = self._list(entity_type, entity_id, key)
        if items is None:
            return False
        kept = [item for item in items if not strict_equals(item, value)]
        if len(kept) == len(items):
            return False
        return self.repo.set(entity_type, entity_id, key, kept)

    def array_unique(self, entity_type: str, entity_id: int, key: str) -> bool:
        items = self._list(entity_type, entity_id, key)
        if items is None:
            return False
        unique = unique_values(items)
        if len(unique) == len(items):
            return False
        return self.repo.set(entity_type, entity_id, key, unique)

    def array_count(self, entity_type: str, entity_id: int, key: str) -> int:
        items = self._list(entity_type, entity_id, key)
        return len(items) if items is not None else 0

    # ------------------------------------------------------------------
    # Nested (dot-path)
    # ------------------------------------------------------------------

    def get_nested(self, entity_type: str, entity_id: int, key: str, path: str, default: Any = None) -> Any:
        tree = self.get(entity_type, entity_id, key)
        if not isinstance(tree, dict):
            return default
        return get_path(tree, path, default)

    def set_nested(self, entity_type: str, entity_id: int, key: str, path: str, value: Any) -> bool:
        tree = self.get(entity_type, entity_id, key)
        return self.update(entity_type, entity_id, key, set_path(tree, path, value))

    def remove_nested(self, entity_type: str, entity_id: int, key: str, path: str) -> bool:
        tree = self.get(entity_type, entity_id, key)
        if not isinstance(tree, dict):
            return False
        rebuilt, removed = remove_path(tree, path)
        if not removed:
            return False
        return self.update(entity_type, entity_id, key, rebuilt)

    # ------------------------------------------------------------------
    # JSON
    # ------------------------------------------------------------------

    def get_json(
        self,
        entity_type: str,
        entity_id: int,
        key: str,
        default: dict[str, Any] | list[Any] | None = None,
    ) -> dict[str, Any] | list[Any]:
        fallback: dict[str, Any] | list[Any] = {} if default is None else default
        value = self._raw(entity_type, entity_id, key)
        if is_absent(value):
            return fallback
        if isinstance(value, (dict, list)):
            return value
        if isinstance(value, str):
            try:
                decoded = json.loads(value)
            except json.JSONDecodeError:
                logger.debug("Meta %s on %s %s is not valid JSON", key, entity_type, entity_id)
                return fallback
            return decoded if isinstance(decoded, (dict, list)) else fallback
        return fallback

    def set_json(self, entity_type: str, entity_id: int, key: str, value: dict[str, Any] | list[Any]) -> bool:
        return self.update(entity_type, entity_id, key, value)

    # ------------------------------------------------------------------
    # Boolean
    # ------------------------------------------------------------------

    def is_truthy(self, entity_type: str, entity_id: int, key: str, default: bool = False) -> bool:
        value = self._raw(entity_type, entity_id, key)
        return default if is_absent(value) else to_bool(value)

    def toggle(self, entity_type: str, entity_id: int, key: str) -> bool | None:
        flipped = not self.get_cast(entity_type, entity_id, key, CastKind.BOOL, False)
        return flipped if self.repo.set(entity_type, entity_id, key, flipped) else None

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def get_type(self, entity_type: str, entity_id: int, key: str) -> str | None:
        value = self.get(entity_type, entity_id, key)
        return type_name(value) if value is not None else None

    def value_size(self, value: Any) -> int:
        """Byte length of the value as the backing store serializes it."""
        return len(self.repo.serialize(value).encode("utf-8"))

    def get_size(self, entity_type: str, entity_id: int, key: str) -> int:
        value = self.get(entity_type, entity_id, key)
        if value is None:
            return 0
        return self.value_size(value)

    def is_type(self, entity_type: str, entity_id: int, key: str, expected: str) -> bool:
        actual = self.get_type(entity_type, entity_id, key)
        return actual is not None and actual == expected

    def is_large(self, entity_type: str, entity_id: int, key: str, size_limit: int | None = None) -> bool:
        limit = self.large_value_bytes if size_limit is None else size_limit
        return self.get_size(entity_type, entity_id, key) > limit

    def migrate_key(
        self,
        entity_type: str,
        entity_id: int,
        old_key: str,
        new_key: str,
        delete_old: bool = True,
    ) -> bool:
        # An absent source is copied as the absence sentinel; check exists() first to skip it.
        value = self._raw(entity_type, entity_id, old_key)
        updated = self.repo.set(entity_type, entity_id, new_key, ABSENT if is_absent(value) else value)
        if updated and delete_old:
            return self.repo.delete(entity_type, entity_id, old_key)
        return updated


__all__ = ["DEFAULT_SIZE_LIMIT", "MetaAccessor", "require_entity_type"]
