"""Helpers for reading loosely-shaped backend records.

The Arobid API is not consistent about where lists live in a response or what
its ID and name fields are called, so lookups go through ordered candidate
paths and keys, first match wins.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Optional

ListPath = tuple[str, ...]


def dig(value: Any, path: ListPath) -> Any:
    """Follow ``path`` through nested dicts. The empty path returns ``value``."""
    for key in path:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def first_list(response: Any, paths: Iterable[ListPath]) -> list:
    """Return the first list found along ``paths``, or an empty list."""
    for path in paths:
        candidate = dig(response, path)
        if isinstance(candidate, list):
            return candidate
    return []


def first_string(record: Any, keys: Iterable[str]) -> Optional[str]:
    """First non-blank string value among ``keys``, trimmed."""
    if not isinstance(record, dict):
        return None
    for key in keys:
        value = record.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def first_identifier(record: Any, keys: Iterable[str]) -> Optional[str]:
    """First non-blank string or number among ``keys``, as a trimmed string.

    Integral floats render without a fraction (``1.0`` -> ``"1"``); NaN and
    infinities are skipped.
    """
    if not isinstance(record, dict):
        return None
    for key in keys:
        value = record.get(key)
        # bool is an int subclass but never an ID
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            continue
        if isinstance(value, float):
            if not math.isfinite(value):
                continue
            if value.is_integer():
                value = int(value)
        text = str(value).strip()
        if text:
            return text
    return None
