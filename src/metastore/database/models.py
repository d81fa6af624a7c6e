from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from metastore.values import is_numeric, to_float, to_text

logger = logging.getLogger(__name__)

DEFAULT_ENTITY_TYPES: tuple[str, ...] = ("post", "user", "term", "comment")


class Comparator(str, Enum):
    EQ = "="
    NE = "!="
    GT = ">"
    LT = "<"
    GE = ">="
    LE = "<="
    LIKE = "LIKE"

    @classmethod
    def parse(cls, compare: Comparator | str) -> Comparator:
        if isinstance(compare, Comparator):
            return compare
        op = str(compare).strip().upper()
        if op == "<>":
            return cls.NE
        for member in cls:
            if member.value == op:
                return member
        logger.warning("Unknown comparator %r, falling back to '='", compare)
        return cls.EQ


def compares_numerically(comparator: Comparator, operand: Any) -> bool:
    """Ordering comparators against a real number compare as numbers, everything else as text."""
    if comparator in (Comparator.EQ, Comparator.NE, Comparator.LIKE):
        return False
    return not isinstance(operand, bool) and isinstance(operand, (int, float)) and is_numeric(operand)


def matches(stored: Any, operand: Any, comparator: Comparator) -> bool:
    """Evaluate ``stored <comparator> operand`` the way the SQL adapters do."""
    text = to_text(stored)
    if comparator is Comparator.LIKE:
        return to_text(operand).lower() in text.lower()
    if compares_numerically(comparator, operand):
        left: Any = to_float(text)
        right: Any = float(operand)
    else:
        left, right = text, to_text(operand)
    if comparator is Comparator.EQ:
        return bool(left == right)
    if comparator is Comparator.NE:
        return bool(left != right)
    if comparator is Comparator.GT:
        return bool(left > right)
    if comparator is Comparator.LT:
        return bool(left < right)
    if comparator is Comparator.GE:
        return bool(left >= right)
    return bool(left <= right)


__all__ = ["Comparator", "DEFAULT_ENTITY_TYPES", "compares_numerically", "matches"]
