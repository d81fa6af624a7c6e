from __future__ import annotations

from collections.abc import Iterable

from metastore.database.inmemory.repositories import InMemoryMetaRepository
from metastore.database.interfaces import Database
from metastore.database.models import DEFAULT_ENTITY_TYPES
from metastore.database.repositories import MetaRepo
from metastore.database.state import DatabaseState


class InMemoryStore(Database):
    def __init__(
        self,
        *,
        entity_types: Iterable[str] | None = None,
        state: DatabaseState | None = None,
    ) -> None:
        self.state = state or DatabaseState(entity_types=tuple(entity_types or DEFAULT_ENTITY_TYPES))
        self.entity_types = self.state.entity_types
        self.meta = self.state.meta
        self.meta_repo: MetaRepo = InMemoryMetaRepository(state=self.state)

    def close(self) -> None:
        return None


__all__ = ["InMemoryStore"]
