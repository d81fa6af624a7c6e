from __future__ import annotations

from typing import Protocol, runtime_checkable

from metastore.database.repositories import MetaRepo


@runtime_checkable
class Database(Protocol):
    """Backend-agnostic database contract."""

    meta_repo: MetaRepo
    entity_types: tuple[str, ...]

    def close(self) -> None: ...


__all__ = ["Database"]
