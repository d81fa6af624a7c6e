from __future__ import annotations

import logging
from typing import Literal

from sqlalchemy import Engine, MetaData, inspect

logger = logging.getLogger(__name__)

DDLMode = Literal["create", "validate"]


def run_migrations(*, engine: Engine, metadata: MetaData, ddl_mode: DDLMode = "create") -> None:
    """Create the meta tables, or check they exist when ``ddl_mode`` is "validate"."""
    if ddl_mode == "create":
        metadata.create_all(engine)
        logger.debug("Postgres meta tables created/verified")
        return
    existing = set(inspect(engine).get_table_names())
    missing = sorted(name for name in metadata.tables if name not in existing)
    if missing:
        msg = f"Missing metastore tables (ddl_mode=validate): {', '.join(missing)}"
        raise RuntimeError(msg)


__all__ = ["DDLMode", "run_migrations"]
