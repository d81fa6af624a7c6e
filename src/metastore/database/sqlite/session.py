"""Session management for the SQLite backend."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import create_engine
from sqlmodel import Session

logger = logging.getLogger(__name__)


class SQLiteSessionManager:
    """Own the SQLite engine and hand out short-lived sessions."""

    def __init__(self, *, dsn: str, engine_kwargs: dict[str, Any] | None = None) -> None:
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        kwargs.update(engine_kwargs or {})
        self.engine = create_engine(dsn, **kwargs)

    def session(self) -> Session:
        return Session(self.engine, expire_on_commit=False)

    def close(self) -> None:
        try:
            self.engine.dispose()
        except Exception as exc:
            logger.warning("Failed to dispose SQLite engine: %s", exc)


__all__ = ["SQLiteSessionManager"]
