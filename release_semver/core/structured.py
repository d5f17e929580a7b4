"""Helpers for reading untyped TOML values with runtime validation."""

from __future__ import annotations

from typing import Mapping, TypeGuard, cast

StrDict = dict[str, object]

_TRUE_WORDS = frozenset({"true", "1", "yes", "on", "y", "t"})
_FALSE_WORDS = frozenset({"false", "0", "no", "off", "n", "f", ""})


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    """Return True if obj is a dict with string keys."""
    if not isinstance(obj, dict):
        return False
    d = cast(dict[object, object], obj)
    return all(isinstance(k, str) for k in d.keys())


def as_str_dict(obj: object) -> StrDict | None:
    """Return obj as StrDict if it matches, else None."""
    if is_str_dict(obj):
        return obj
    return None


def get_str(table: Mapping[str, object], *keys: str) -> str | None:
    """Get the first non-empty string stored under one of ``keys``.

    Values are stripped; missing, non-string and blank values are skipped.
    """
    for key in keys:
        value = table.get(key)
        if not isinstance(value, str):
            continue
        s = value.strip()
        if s:
            return s
    return None


def parse_bool(value: object) -> bool | None:
    """Coerce a flag value to a bool.

    Accepts real booleans and the usual words (``"false"``, ``"0"``,
    ``"no"``, ``"off"`` ...). Returns None for anything else.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if not isinstance(value, str):
        return None
    word = value.strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    return None


def get_bool(table: Mapping[str, object], *keys: str) -> bool | None:
    """Get the first coercible boolean stored under one of ``keys``."""
    for key in keys:
        if key not in table:
            continue
        parsed = parse_bool(table[key])
        if parsed is not None:
            return parsed
    return None
