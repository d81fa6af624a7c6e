import pytest

from metastore import MetaService


def build_service(provider: str = "inmemory", tmp_path=None, **extra) -> MetaService:
    store: dict = {"provider": provider}
    if provider == "sqlite":
        store["dsn"] = f"sqlite:///{tmp_path / 'metastore_test.db'}"
    return MetaService(database_config={"metadata_store": store, **extra})


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch, tmp_path):
    monkeypatch.setenv("METASTORE_CONFIG", str(tmp_path / "missing.json"))
    monkeypatch.delenv("METASTORE_DSN", raising=False)


@pytest.fixture(params=["inmemory", "sqlite"])
def service(request, tmp_path):
    svc = build_service(request.param, tmp_path)
    yield svc
    svc.close()
