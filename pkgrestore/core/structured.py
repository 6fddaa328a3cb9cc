"""Helpers for reading untyped TOML tables.

Used where ``tomllib`` output enters the typed world (restore.toml and the
shipped translation table).
"""

from __future__ import annotations

from typing import Mapping, TypeGuard, cast

StrDict = dict[str, object]


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    """Return True if obj is a dict with string keys."""
    if not isinstance(obj, dict):
        return False
    d = cast(dict[object, object], obj)
    return all(isinstance(k, str) for k in d.keys())


def as_str_dict(obj: object) -> StrDict | None:
    if is_str_dict(obj):
        return obj
    return None


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    """Get a nested table from a mapping, or None."""
    return as_str_dict(table.get(key))


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Get a stripped, non-empty string value, or None."""
    value = table.get(key)
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None


def get_number(table: Mapping[str, object], key: str) -> float | None:
    """Get an int or float value as float. Booleans are rejected."""
    value = table.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def get_bool(table: Mapping[str, object], key: str) -> bool | None:
    value = table.get(key)
    if isinstance(value, bool):
        return value
    return None


def as_str_list(obj: object) -> list[str] | None:
    """Accept a string or a list of strings; return a list of stripped names.

    A single string is split on whitespace so ``"nodejs npm"`` reads the same
    as ``["nodejs", "npm"]``. Returns None for any other shape.
    """
    if isinstance(obj, str):
        return obj.split()
    if not isinstance(obj, list):
        return None
    items = cast(list[object], obj)
    out: list[str] = []
    for item in items:
        if not isinstance(item, str):
            return None
        s = item.strip()
        if s:
            out.append(s)
    return out
