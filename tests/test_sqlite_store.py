from pathlib import Path

import pytest
from sqlalchemy import inspect
from sqlmodel import Session

from metastore import MetaService
from metastore.database.sqlite import SQLiteStore


def _dsn(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'store.db'}"


def test_creates_one_table_per_entity_type(tmp_path: Path) -> None:
    store = SQLiteStore(dsn=_dsn(tmp_path), entity_types=["post", "user"])
    try:
        tables = set(inspect(store._sessions.engine).get_table_names())
    finally:
        store.close()

    assert {"meta_postmeta", "meta_usermeta"} <= tables
    assert store.entity_types == ("post", "user")


def test_values_survive_reopen(tmp_path: Path) -> None:
    config = {"metadata_store": {"provider": "sqlite", "dsn": _dsn(tmp_path)}}
    first = MetaService(database_config=config)
    first.meta.update("post", 7, "settings", {"theme": "dark", "cols": [1, 2]})
    first.meta.increment("post", 7, "views", 3)
    first.close()

    second = MetaService(database_config=config)
    try:
        assert second.meta.get("post", 7, "settings") == {"theme": "dark", "cols": [1, 2]}
        assert second.meta.get("post", 7, "views") == 3
    finally:
        second.close()


def test_existing_table_prefix_is_reused(tmp_path: Path) -> None:
    seeded = SQLiteStore(dsn=_dsn(tmp_path), entity_types=["post"], table_prefix="wp_")
    seeded.meta_repo.set("post", 1, "color", "red")
    seeded.close()

    reopened = SQLiteStore(dsn=_dsn(tmp_path), entity_types=["post"])
    try:
        assert reopened.meta_repo.get("post", 1, "color") == "red"
        assert "meta_postmeta" not in inspect(reopened._sessions.engine).get_table_names()
    finally:
        reopened.close()


def test_write_collapses_duplicate_rows(tmp_path: Path) -> None:
    store = SQLiteStore(dsn=_dsn(tmp_path), entity_types=["post"])
    model = store._sqla_models.Meta["post"]
    with Session(store._sessions.engine) as session:
        session.add(model(object_id=1, meta_key="tag", meta_value="a", value_json='"a"'))
        session.add(model(object_id=1, meta_key="tag", meta_value="b", value_json='"b"'))
        session.commit()

    try:
        assert store.meta_repo.get("post", 1, "tag", False) == ["a", "b"]
        assert store.meta_repo.get("post", 1, "tag") == "a"

        assert store.meta_repo.set("post", 1, "tag", "c") is True
        assert store.meta_repo.get("post", 1, "tag", False) == ["c"]
    finally:
        store.close()


def test_delete_rows_by_key_counts_rows(tmp_path: Path) -> None:
    store = SQLiteStore(dsn=_dsn(tmp_path), entity_types=["post"])
    try:
        for entity_id in (1, 2, 3):
            store.meta_repo.set("post", entity_id, "_cache", entity_id)
        store.meta_repo.set("post", 1, "_cached_at", "now")

        assert store.meta_repo.distinct_keys_by_prefix("post", "_cache") == ["_cache", "_cached_at"]
        assert store.meta_repo.delete_rows_by_key("post", "_cache") == 3
        assert store.meta_repo.get_all("post", 2) == {}
    finally:
        store.close()


def test_undecodable_row_falls_back_to_text(tmp_path: Path) -> None:
    store = SQLiteStore(dsn=_dsn(tmp_path), entity_types=["post"])
    model = store._sqla_models.Meta["post"]
    with Session(store._sessions.engine) as session:
        session.add(model(object_id=1, meta_key="legacy", meta_value="raw text", value_json="{broken"))
        session.commit()

    try:
        assert store.meta_repo.get("post", 1, "legacy") == "raw text"
    finally:
        store.close()


def _drop_post_table(service: MetaService) -> None:
    store = service.database
    store._sqla_models.Meta["post"].__table__.drop(store._sessions.engine)


def test_missing_table_degrades_to_failure_values(tmp_path: Path) -> None:
    service = MetaService(database_config={"metadata_store": {"provider": "sqlite", "dsn": _dsn(tmp_path)}})
    service.meta.update("post", 1, "k", 5)
    _drop_post_table(service)

    try:
        assert service.metas.bulk_update("post", [1, 2], "k", 1) == {1: False, 2: False}
        assert service.metas.bulk_get("post", [1, 2], "k") == {}
        assert service.meta.get("post", 1, "k") is None
        assert service.meta.increment("post", 1, "k") is None
        assert service.meta.toggle("post", 1, "k") is None
        assert service.meta.update_if_changed("post", 1, "k", 1) is False
        assert service.meta.array_append("post", 1, "k", 1) is False
        assert service.metas.get_all("post", 1) == {}
        assert service.metas.get_stats("post", [1, 2], "k")["numeric_values"] == 0
        assert service.metas.compare_values("post", [1, 2], "k")["objects_without_meta"] == 2
        # Other entity types keep working.
        assert service.meta.update("user", 1, "k", 1) is True
        assert service.meta.get("user", 1, "k") == 1
    finally:
        service.close()


@pytest.mark.asyncio
async def test_health_reports_missing_table(tmp_path: Path) -> None:
    service = MetaService(database_config={"metadata_store": {"provider": "sqlite", "dsn": _dsn(tmp_path)}})
    assert (await service.health())["ok"] is True
    _drop_post_table(service)

    status = await service.health()
    service.close()

    assert status["ok"] is False
    assert status["db"]["ok"] is False
    assert "meta_postmeta" in status["error"]
