"""Value coercion, comparison and dot-path helpers shared by the accessor and coordinator.

Attribute values are loosely typed: scalars (``int``, ``float``, ``bool``, ``str``)
or nested ``list``/``dict`` containers. Nothing here touches storage.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Hashable, Iterable
from enum import Enum
from typing import Any

# Backing stores return this for a missing single value.
ABSENT = ""

_NUMERIC_PREFIX = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_NUMERIC_STRING = re.compile(r"\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\s*")


class CastKind(str, Enum):
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    ARRAY = "array"
    STRING = "string"

    @classmethod
    def parse(cls, kind: CastKind | str) -> CastKind | None:
        if isinstance(kind, CastKind):
            return kind
        return _CAST_ALIASES.get(str(kind).strip().lower())


_CAST_ALIASES: dict[str, CastKind] = {
    "int": CastKind.INT,
    "integer": CastKind.INT,
    "float": CastKind.FLOAT,
    "double": CastKind.FLOAT,
    "bool": CastKind.BOOL,
    "boolean": CastKind.BOOL,
    "array": CastKind.ARRAY,
    "list": CastKind.ARRAY,
    "sequence": CastKind.ARRAY,
    "string": CastKind.STRING,
    "str": CastKind.STRING,
}


def is_absent(raw: Any) -> bool:
    return raw is None or (isinstance(raw, str) and raw == ABSENT)


def _leading_number(text: str) -> float:
    match = _NUMERIC_PREFIX.match(text.lstrip())
    if match is None:
        return 0.0
    try:
        return float(match.group(0))
    except ValueError:
        return 0.0


def to_float(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        return _leading_number(value)
    if isinstance(value, (list, tuple, dict)):
        return 1.0 if value else 0.0
    return 0.0


def to_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.lstrip()
        match = _NUMERIC_PREFIX.match(text)
        if match is None:
            return 0
        token = match.group(0)
        if token.lstrip("+-").isdigit():
            return int(token)
        value = _leading_number(text)
    number = value if isinstance(value, float) else to_float(value)
    if not math.isfinite(number):
        return 0
    return int(number)


def to_bool(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value not in ("", "0")
    return bool(value)


def to_text(value: Any) -> str:
    """Text form of a value: what a text column holds and what ``LIKE`` sees."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else ""
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def to_array(value: Any) -> list[Any] | dict[str, Any]:
    if value is None:
        return []
    if isinstance(value, (list, dict)):
        return value
    if isinstance(value, tuple):
        return list(value)
    return [value]


def cast_value(value: Any, kind: CastKind | str) -> Any:
    """Coerce ``value`` to ``kind``; unknown kinds return the value unchanged."""
    target = CastKind.parse(kind)
    if target is CastKind.INT:
        return to_int(value)
    if target is CastKind.FLOAT:
        return to_float(value)
    if target is CastKind.BOOL:
        return to_bool(value)
    if target is CastKind.ARRAY:
        return to_array(value)
    if target is CastKind.STRING:
        return to_text(value)
    return value


def is_numeric(value: Any) -> bool:
    """True for real numbers and numeric strings; bools and containers are not numeric."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return math.isfinite(value)
    if isinstance(value, str):
        return _NUMERIC_STRING.fullmatch(value) is not None
    return False


def strict_equals(left: Any, right: Any) -> bool:
    """Type-aware deep equality: ``"1" != 1``, ``True != 1`` and ``1 != 1.0``."""
    if type(left) is not type(right):
        return False
    if isinstance(left, dict):
        if left.keys() != right.keys():
            return False
        return all(strict_equals(left[key], right[key]) for key in left)
    if isinstance(left, (list, tuple)):
        if len(left) != len(right):
            return False
        return all(strict_equals(a, b) for a, b in zip(left, right))
    return bool(left == right)


def strict_index(items: Iterable[Any], value: Any) -> int:
    for idx, item in enumerate(items):
        if strict_equals(item, value):
            return idx
    return -1


def unique_values(items: Iterable[Any]) -> list[Any]:
    unique: list[Any] = []
    for item in items:
        if strict_index(unique, item) == -1:
            unique.append(item)
    return unique


def canonical_key(value: Any) -> Hashable:
    """Bucket key for occurrence counting; equal composites share one key."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return json.dumps(value, ensure_ascii=False, sort_keys=True, separators=(",", ":"), default=str)


def serialize_value(value: Any) -> str:
    return to_text(value)


def type_name(value: Any) -> str:
    return type(value).__name__


# ---------------------------------------------------------------------------
# Dot-path helpers
# ---------------------------------------------------------------------------


def split_path(path: str) -> list[str]:
    return path.split(".")


def get_path(tree: Any, path: str, default: Any = None) -> Any:
    node = tree
    for segment in split_path(path):
        if not isinstance(node, dict) or segment not in node:
            return default
        node = node[segment]
    return node


def set_path(tree: Any, path: str, value: Any) -> dict[str, Any]:
    """Return a new tree with ``value`` at ``path``; non-mapping nodes on the way are replaced."""
    return _assign(tree, split_path(path), value)


def _assign(node: Any, segments: list[str], value: Any) -> Any:
    if not segments:
        return value
    head, rest = segments[0], segments[1:]
    base = dict(node) if isinstance(node, dict) else {}
    base[head] = _assign(base.get(head), rest, value)
    return base


def remove_path(tree: Any, path: str) -> tuple[Any, bool]:
    """Return ``(new_tree, removed)``; the tree is unchanged when the path does not resolve."""
    return _without(tree, split_path(path))


def _without(node: Any, segments: list[str]) -> tuple[Any, bool]:
    if not isinstance(node, dict):
        return node, False
    head, rest = segments[0], segments[1:]
    if head not in node:
        return node, False
    if not rest:
        return {k: v for k, v in node.items() if k != head}, True
    child, removed = _without(node[head], rest)
    if not removed:
        return node, False
    rebuilt = dict(node)
    rebuilt[head] = child
    return rebuilt, True


__all__ = [
    "ABSENT",
    "CastKind",
    "canonical_key",
    "cast_value",
    "get_path",
    "is_absent",
    "is_numeric",
    "remove_path",
    "serialize_value",
    "set_path",
    "strict_equals",
    "strict_index",
    "to_array",
    "to_bool",
    "to_float",
    "to_int",
    "to_text",
    "type_name",
    "unique_values",
]
