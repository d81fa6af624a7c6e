from __future__ import annotations

import logging

from sqlalchemy import create_engine
from sqlmodel import Session

logger = logging.getLogger(__name__)


class SessionManager:
    def __init__(self, *, dsn: str) -> None:
        self.engine = create_engine(dsn, pool_pre_ping=True)

    def session(self) -> Session:
        return Session(self.engine, expire_on_commit=False)

    def close(self) -> None:
        try:
            self.engine.dispose()
        except Exception as exc:
            logger.warning("Failed to dispose Postgres engine: %s", exc)


__all__ = ["SessionManager"]
