from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Literal

from metastore.app.accessor import MetaAccessor, require_entity_type
from metastore.database.models import Comparator
from metastore.database.repositories import MetaRepo
from metastore.values import canonical_key, is_numeric, to_float, unique_values

logger = logging.getLogger(__name__)

SyncDirection = Literal["to_meta", "from_meta", "both"]


class MetaBulk:
    """Multi-key and multi-entity operations composed from :class:`MetaAccessor` calls.

    Owns no storage. Items are processed in input order and one failure never
    aborts the rest of a batch.
    """

    def __init__(self, repo: MetaRepo, *, accessor: MetaAccessor | None = None) -> None:
        self.repo = repo
        self.accessor = accessor or MetaAccessor(repo)

    # ------------------------------------------------------------------
    # One entity, many keys
    # ------------------------------------------------------------------

    def get_many(self, entity_type: str, entity_id: int, keys: Iterable[str], single: bool = True) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for key in keys:
            value = self.accessor.get(entity_type, entity_id, key, single)
            if value is not None:
                values[key] = value
        return values

    def get_all(self, entity_type: str, entity_id: int) -> dict[str, list[Any]]:
        require_entity_type(entity_type)
        return self.repo.get_all(entity_type, entity_id) or {}

    def update_many(
        self,
        entity_type: str,
        entity_id: int,
        values: Mapping[str, Any],
        skip_unchanged: bool = True,
    ) -> list[str]:
        write = self.accessor.update_if_changed if skip_unchanged else self.accessor.update
        return [key for key, value in values.items() if write(entity_type, entity_id, key, value)]

    def delete_many(self, entity_type: str, entity_id: int, keys: Iterable[str]) -> int:
        return sum(1 for key in keys if self.accessor.delete(entity_type, entity_id, key))

    def backup(self, entity_type: str, entity_id: int, keys: Iterable[str]) -> dict[str, Any]:
        return self.get_many(entity_type, entity_id, keys, single=True)

    def restore(self, entity_type: str, entity_id: int, backup: Mapping[str, Any]) -> list[str]:
        return self.update_many(entity_type, entity_id, backup, skip_unchanged=False)

    # ------------------------------------------------------------------
    # Prefix patterns
    # ------------------------------------------------------------------

    def get_by_prefix(
        self,
        entity_type: str,
        entity_id: int,
        prefix: str,
        with_values: bool = True,
    ) -> dict[str, Any] | list[str]:
        matched = {key: values for key, values in self.get_all(entity_type, entity_id).items() if key.startswith(prefix)}
        if not with_values:
            return list(matched)
        return {key: values[0] if values else values for key, values in matched.items()}

    def delete_by_prefix(self, entity_type: str, prefix: str) -> int:
        """Delete every row whose key starts with ``prefix`` across all entities of ``entity_type``."""
        require_entity_type(entity_type)
        if not prefix:
            logger.warning("delete_by_prefix called with an empty prefix on %s: every key matches", entity_type)
        count = 0
        for key in self.repo.distinct_keys_by_prefix(entity_type, prefix):
            count += self.repo.delete_rows_by_key(entity_type, key)
        logger.info("Deleted %d %s meta rows with prefix %r", count, entity_type, prefix)
        return count

    # ------------------------------------------------------------------
    # One key, many entities
    # ------------------------------------------------------------------

    def bulk_get(self, entity_type: str, entity_ids: Iterable[int], key: str) -> dict[int, Any]:
        values: dict[int, Any] = {}
        for entity_id in entity_ids:
            value = self.accessor.get(entity_type, entity_id, key)
            if value is not None:
                values[entity_id] = value
        return values

    def bulk_update(self, entity_type: str, entity_ids: Iterable[int], key: str, value: Any) -> dict[int, bool]:
        return {entity_id: self.accessor.update(entity_type, entity_id, key, value) for entity_id in entity_ids}

    def bulk_delete(self, entity_type: str, entity_ids: Iterable[int], key: str) -> dict[int, bool]:
        return {entity_id: self.accessor.delete(entity_type, entity_id, key) for entity_id in entity_ids}

    # ------------------------------------------------------------------
    # Analysis & search
    # ------------------------------------------------------------------

    def find_large(self, entity_type: str, entity_id: int, size_limit: int | None = None) -> dict[str, int]:
        limit = self.accessor.large_value_bytes if size_limit is None else size_limit
        large: dict[str, int] = {}
        for key, values in self.get_all(entity_type, entity_id).items():
            if not values:
                continue
            size = self.accessor.value_size(values[0])
            if size > limit:
                large[key] = size
        return large

    def find_objects_by_value(
        self,
        entity_type: str,
        key: str,
        value: Any,
        compare: Comparator | str = Comparator.EQ,
    ) -> list[int]:
        require_entity_type(entity_type)
        return self.repo.find_ids(entity_type, key, value, Comparator.parse(compare))

    def compare_values(self, entity_type: str, entity_ids: Sequence[int], key: str) -> dict[str, Any]:
        if not entity_ids:
            return {}
        values: dict[int, Any] = {}
        value_counts: dict[Any, int] = {}
        with_meta = without_meta = 0
        for entity_id in entity_ids:
            value = self.accessor.get(entity_type, entity_id, key)
            if value is None:
                without_meta += 1
                continue
            with_meta += 1
            values[entity_id] = value
            bucket = canonical_key(value)
            value_counts[bucket] = value_counts.get(bucket, 0) + 1
        return {
            "value_counts": value_counts,
            "objects_with_meta": with_meta,
            "objects_without_meta": without_meta,
            "values": values,
            "unique_values": unique_values(values.values()),
        }

    def get_stats(self, entity_type: str, entity_ids: Sequence[int], key: str) -> dict[str, Any]:
        """Numeric summary of ``key`` over a cohort; absent and non-numeric values are skipped."""
        if not entity_ids:
            return {}
        numbers: list[float] = []
        for entity_id in entity_ids:
            value = self.accessor.get(entity_type, entity_id, key)
            if is_numeric(value):
                numbers.append(to_float(value))
        stats: dict[str, Any] = {
            "count": len(entity_ids),
            "numeric_values": len(numbers),
            "min": None,
            "max": None,
            "average": None,
            "sum": None,
        }
        if numbers:
            total = sum(numbers)
            stats.update(min=min(numbers), max=max(numbers), average=total / len(numbers), sum=total)
        return stats

    # ------------------------------------------------------------------
    # Object sync
    # ------------------------------------------------------------------

    def sync_with_meta(
        self,
        obj: object,
        entity_id: int,
        field_map: Mapping[str, str],
        entity_type: str = "post",
        direction: SyncDirection = "to_meta",
    ) -> bool:
        """Copy attributes of ``obj`` to metadata, metadata onto ``obj``, or both.

        ``field_map`` maps attribute names to meta keys. Absent meta keys leave the
        attribute untouched. Returns False when any write fails.
        """
        if not entity_id or not field_map:
            return False
        success = True
        for attr, key in field_map.items():
            if direction in ("to_meta", "both") and hasattr(obj, attr):
                if not self.accessor.update(entity_type, entity_id, key, getattr(obj, attr)):
                    logger.warning("Failed to sync %s.%s to meta %s", type(obj).__name__, attr, key)
                    success = False
            if direction in ("from_meta", "both"):
                value = self.accessor.get(entity_type, entity_id, key)
                if value is not None:
                    setattr(obj, attr, value)
        return success


__all__ = ["MetaBulk", "SyncDirection"]
