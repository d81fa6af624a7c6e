from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from metastore.database.models import DEFAULT_ENTITY_TYPES


@dataclass
class DatabaseState:
    entity_types: tuple[str, ...] = DEFAULT_ENTITY_TYPES
    # entity_type -> entity_id -> key -> stored values
    meta: dict[str, dict[int, dict[str, list[Any]]]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for entity_type in self.entity_types:
            self.meta.setdefault(entity_type, {})


__all__ = ["DatabaseState"]
