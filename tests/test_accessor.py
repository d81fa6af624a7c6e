import pytest


def test_view_count_starts_from_zero(service) -> None:
    meta = service.meta

    assert meta.get_cast("post", 123, "view_count", "int") == 0
    assert meta.increment("post", 123, "view_count") == 1
    assert meta.get("post", 123, "view_count") == 1
    assert meta.increment("post", 123, "view_count", 5) == 6


def test_increment_then_decrement_restores_value(service) -> None:
    meta = service.meta
    meta.update("post", 1, "score", "12abc")

    assert meta.increment("post", 1, "score", 3) == 15
    assert meta.decrement("post", 1, "score", 3) == 12
    # The amount's sign is ignored when decrementing.
    assert meta.decrement("post", 1, "score", -2) == 10


def test_absent_reads(service) -> None:
    meta = service.meta

    assert meta.exists("post", 1, "missing") is False
    assert meta.get("post", 1, "missing") is None
    assert meta.get("post", 1, "missing", single=False) is None
    assert meta.get_with_default("post", 1, "missing", "fallback") == "fallback"
    assert meta.get_cast("post", 1, "missing", "bool", "yes") is True
    assert meta.get_type("post", 1, "missing") is None
    assert meta.get_size("post", 1, "missing") == 0


def test_values_keep_their_type(service) -> None:
    meta = service.meta
    meta.update("user", 9, "flag", True)
    meta.update("user", 9, "ratio", 1.5)
    meta.update("user", 9, "code", "007")
    meta.update("user", 9, "tags", ["a", 1])

    assert meta.get("user", 9, "flag") is True
    assert meta.get("user", 9, "ratio") == 1.5
    assert meta.get("user", 9, "code") == "007"
    assert meta.get("user", 9, "tags", single=False) == [["a", 1]]
    assert meta.get_type("user", 9, "code") == "str"
    assert meta.is_type("user", 9, "tags", "list")
    assert not meta.is_type("user", 9, "tags", "dict")


def test_update_if_changed_uses_strict_equality(service) -> None:
    meta = service.meta

    assert meta.update_if_changed("post", 1, "count", 1) is True
    assert meta.update_if_changed("post", 1, "count", 1) is False
    assert meta.update_if_changed("post", 1, "count", "1") is True
    assert meta.get("post", 1, "count") == "1"


def test_delete(service) -> None:
    meta = service.meta
    meta.update("post", 4, "draft", "yes")

    assert meta.delete("post", 0, "draft") is False
    assert meta.delete("post", -4, "draft") is False
    assert meta.delete("post", 4, "draft") is True
    assert meta.delete("post", 4, "draft") is False
    assert meta.exists("post", 4, "draft") is False


def test_toggle_and_truthiness(service) -> None:
    meta = service.meta

    assert meta.is_truthy("post", 1, "featured", default=True) is True
    assert meta.toggle("post", 1, "featured") is True
    assert meta.get("post", 1, "featured") is True
    assert meta.toggle("post", 1, "featured") is False

    meta.update("post", 1, "legacy_flag", "0")
    assert meta.is_truthy("post", 1, "legacy_flag", default=True) is False


def test_array_operations(service) -> None:
    meta = service.meta

    assert meta.array_append("post", 1, "tags", "a") is True
    meta.array_append("post", 1, "tags", 1)
    meta.array_append("post", 1, "tags", "a")
    meta.array_append("post", 1, "tags", {"k": "v"})

    assert meta.get("post", 1, "tags") == ["a", 1, "a", {"k": "v"}]
    assert meta.array_count("post", 1, "tags") == 4
    assert meta.array_contains("post", 1, "tags", {"k": "v"})
    assert not meta.array_contains("post", 1, "tags", "1")
    assert not meta.array_contains("post", 1, "tags", True)

    assert meta.array_remove("post", 1, "tags", "a") is True
    assert meta.get("post", 1, "tags") == [1, "a", {"k": "v"}]
    assert meta.array_remove("post", 1, "tags", "1") is False

    meta.array_append("post", 1, "tags", 1)
    assert meta.array_unique("post", 1, "tags") is True
    assert meta.get("post", 1, "tags") == [1, "a", {"k": "v"}]
    assert meta.array_unique("post", 1, "tags") is False

    assert meta.array_remove_all("post", 1, "tags", 1) is True
    assert meta.array_remove_all("post", 1, "tags", 1) is False
    assert meta.get("post", 1, "tags") == ["a", {"k": "v"}]


def test_array_operations_on_non_lists(service) -> None:
    meta = service.meta
    meta.update("post", 2, "title", "hello")

    assert meta.array_count("post", 2, "title") == 0
    assert meta.array_contains("post", 2, "title", "hello") is False
    assert meta.array_remove("post", 2, "title", "hello") is False
    assert meta.array_unique("post", 2, "missing") is False
    # Appending to a non-list starts a fresh list.
    assert meta.array_append("post", 2, "title", "x") is True
    assert meta.get("post", 2, "title") == ["x"]


def test_nested_paths(service) -> None:
    meta = service.meta

    assert meta.set_nested("post", 1, "settings", "a.b", 5) is True
    assert meta.get_nested("post", 1, "settings", "a.b") == 5
    assert meta.get_nested("post", 1, "settings", "a.b.c", "d") == "d"
    assert meta.get_nested("post", 1, "missing", "a", "d") == "d"

    meta.set_nested("post", 1, "settings", "a.c", [1, 2])
    assert meta.get("post", 1, "settings") == {"a": {"b": 5, "c": [1, 2]}}

    assert meta.remove_nested("post", 1, "settings", "a.b") is True
    assert meta.remove_nested("post", 1, "settings", "a.b") is False
    assert meta.get("post", 1, "settings") == {"a": {"c": [1, 2]}}


def test_set_nested_replaces_scalar_value(service) -> None:
    meta = service.meta
    meta.update("post", 1, "layout", "wide")

    assert meta.set_nested("post", 1, "layout", "sidebar.visible", False) is True
    assert meta.get("post", 1, "layout") == {"sidebar": {"visible": False}}


def test_json_helpers(service) -> None:
    meta = service.meta

    assert meta.get_json("post", 1, "doc") == {}
    assert meta.get_json("post", 1, "doc", []) == []

    meta.update("post", 1, "doc", '{"a": 1}')
    assert meta.get_json("post", 1, "doc") == {"a": 1}

    meta.update("post", 1, "doc", "not json")
    assert meta.get_json("post", 1, "doc") == {}

    assert meta.set_json("post", 1, "doc", {"b": [1, 2]}) is True
    assert meta.get_json("post", 1, "doc") == {"b": [1, 2]}


def test_size_and_large_values(service) -> None:
    meta = service.meta
    meta.update("post", 1, "body", "hello")
    meta.update("post", 1, "doc", {"a": 1})

    assert meta.get_size("post", 1, "body") == 5
    assert meta.get_size("post", 1, "doc") == len('{"a":1}')
    assert meta.is_large("post", 1, "body", 4) is True
    assert meta.is_large("post", 1, "body", 5) is False
    assert meta.is_large("post", 1, "body") is False

    meta.update("post", 1, "name", "h\u00e9llo")
    assert meta.get_size("post", 1, "name") == 6
    assert service.metas.find_large("post", 1, 5) == {"doc": 7, "name": 6}


def test_migrate_key_moves_value(service) -> None:
    meta = service.meta
    meta.update("post", 1, "old", {"x": 1})

    assert meta.migrate_key("post", 1, "old", "new") is True
    assert meta.get("post", 1, "new") == {"x": 1}
    assert meta.exists("post", 1, "old") is False

    meta.update("post", 1, "kept", 3)
    assert meta.migrate_key("post", 1, "kept", "copy", delete_old=False) is True
    assert meta.get("post", 1, "kept") == 3
    assert meta.get("post", 1, "copy") == 3


def test_migrate_key_copies_absence(service) -> None:
    meta = service.meta
    meta.update("post", 1, "target", "value")

    assert meta.migrate_key("post", 1, "ghost", "target", delete_old=False) is True
    assert meta.exists("post", 1, "target") is False
    assert service.metas.get_all("post", 1) == {"target": [""]}


def test_entity_type_validation(service) -> None:
    meta = service.meta

    with pytest.raises(ValueError):
        meta.get("", 1, "k")
    with pytest.raises(ValueError):
        meta.update("", 1, "k", 1)

    assert meta.get("widget", 1, "k") is None
    assert meta.update("widget", 1, "k", 1) is False
    assert meta.increment("widget", 1, "k") is None
    assert meta.toggle("widget", 1, "k") is None


def test_unserializable_value_is_rejected(service) -> None:
    if service.database_config.metadata_store.provider == "inmemory":
        pytest.skip("in-memory store keeps arbitrary objects")

    assert service.meta.update("post", 1, "blob", object()) is False
    assert service.meta.exists("post", 1, "blob") is False
