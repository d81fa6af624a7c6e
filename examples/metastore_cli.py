from __future__ import annotations

import asyncio
import json

import typer

from metastore import MetaService

app = typer.Typer()
service = MetaService()


def _parse_value(raw: str) -> object:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


@app.command()
def health() -> None:
    data = asyncio.run(service.health())
    print(json.dumps(data, ensure_ascii=False, indent=2))


@app.command()
def get(entity_type: str, entity_id: int, key: str) -> None:
    print(json.dumps(service.meta.get(entity_type, entity_id, key), ensure_ascii=False, indent=2))


@app.command("set")
def set_value(
    entity_type: str,
    entity_id: int,
    key: str,
    value: str = typer.Argument(..., help="JSON literal; plain text is stored as a string"),
) -> None:
    ok = service.meta.update(entity_type, entity_id, key, _parse_value(value))
    print(json.dumps({"updated": ok}))


@app.command()
def stats(entity_type: str, key: str, ids: list[int]) -> None:
    print(json.dumps(service.metas.get_stats(entity_type, ids, key), ensure_ascii=False, indent=2))


@app.command()
def purge(
    entity_type: str,
    prefix: str,
    yes: bool = typer.Option(False, "--yes", help="Confirm the type-wide delete"),
) -> None:
    if not yes:
        raise typer.BadParameter("purge deletes the prefix across every entity; pass --yes to confirm")
    print(json.dumps({"deleted": service.metas.delete_by_prefix(entity_type, prefix)}))


if __name__ == "__main__":
    app()
