from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from metastore.database.models import Comparator


@runtime_checkable
class MetaRepo(Protocol):
    """Repository contract for per-entity key/value metadata."""

    entity_types: tuple[str, ...]

    def get(self, entity_type: str, entity_id: int, key: str, single: bool = True) -> Any: ...

    def get_all(self, entity_type: str, entity_id: int) -> dict[str, list[Any]]: ...

    def set(self, entity_type: str, entity_id: int, key: str, value: Any) -> bool: ...

    def delete(self, entity_type: str, entity_id: int, key: str) -> bool: ...

    def distinct_keys_by_prefix(self, entity_type: str, prefix: str) -> list[str]: ...

    def delete_rows_by_key(self, entity_type: str, key: str) -> int: ...

    def find_ids(self, entity_type: str, key: str, value: Any, comparator: Comparator) -> list[int]: ...

    def ping(self) -> None: ...

    def serialize(self, value: Any) -> str: ...
