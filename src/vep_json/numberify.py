"""Recursive conversion of numeric-looking strings to numbers."""

import math
import re
from collections.abc import Collection
from typing import Any

_INT_PATTERN = re.compile(r"^[+-]?\d+$")
_FLOAT_PATTERN = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")


def looks_like_number(value: Any) -> bool:
    """Check whether a value is a number or a string holding one.

    Infinity and NaN spellings are rejected, as are literals too large for a
    float, so coerced records stay valid JSON.
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, int | float):
        return True
    if isinstance(value, str):
        if _INT_PATTERN.match(value):
            return True
        return _FLOAT_PATTERN.match(value) is not None and math.isfinite(float(value))
    return False


def to_number(value: str) -> int | float:
    """Convert a numeric string to int or float."""
    if _INT_PATTERN.match(value):
        return int(value)
    return float(value)


def numberify(node: Any, exempt: Collection[str] = frozenset()) -> Any:
    """Convert numeric-looking strings in a nested structure to numbers.

    Dictionaries and lists are walked recursively and a new structure is
    returned. Values under an exempt key are left untouched at any depth,
    so identifiers such as gene ids that happen to be digits stay strings.

    Args:
        node: Structure to convert.
        exempt: Keys whose values must not be converted.

    Returns:
        Converted copy of ``node``.
    """
    if isinstance(node, dict):
        return {
            key: value if key in exempt else numberify(value, exempt)
            for key, value in node.items()
        }
    if isinstance(node, list):
        return [numberify(item, exempt) for item in node]
    if isinstance(node, str) and looks_like_number(node):
        return to_number(node)
    return node
