"""Schema-tolerant field access over registry payloads.

The registry has emitted the same data under different nesting over time and
switches between a single record and a list of records depending on how many
results it has. Every helper here treats ``{"a": x}`` and ``{"a": [x]}`` the
same way and answers ``None`` (never raises) when a path is missing.
"""
from __future__ import annotations

import math
from typing import Any, List, Mapping, Optional, Sequence, Union

Path = Union[str, Sequence[str]]


def as_list(value: Any) -> List[Any]:
    """Normalise a single record, a list of records or nothing into a list."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def first(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def _split(path: Path) -> List[str]:
    if isinstance(path, str):
        return [part for part in path.split(".") if part]
    return list(path)


def dig(payload: Any, path: Path) -> Any:
    """Follow ``path`` through nested mappings, taking the first element of any list on the way."""
    current = payload
    for key in _split(path):
        current = first(current)
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
        if current is None:
            return None
    return current


def extract(payload: Any, *paths: Path) -> Any:
    """Return the first non-blank value found under ``paths``, tried in order."""
    for path in paths:
        value = first(dig(payload, path))
        if not is_blank(value):
            return value
    return None


def extract_list(payload: Any, *paths: Path) -> List[Any]:
    """Like :func:`extract` but keeps every record found under the winning path."""
    for path in paths:
        items = [item for item in as_list(dig(payload, path)) if not is_blank(item)]
        if items:
            return items
    return []


def extract_text(payload: Any, *paths: Path) -> Optional[str]:
    """First scalar value under ``paths`` rendered as a stripped string."""
    for path in paths:
        value = extract(payload, path)
        if value is None or isinstance(value, (Mapping, list, tuple)):
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def _finite(text: str) -> Optional[float]:
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def extract_int(payload: Any, *paths: Path) -> Optional[int]:
    text = extract_text(payload, *paths)
    if text is None:
        return None
    number = _finite(text)
    return None if number is None else int(number)


def extract_float(payload: Any, *paths: Path) -> Optional[float]:
    """Decimal value under ``paths``; comma decimals are accepted, NaN and infinities are not."""
    text = extract_text(payload, *paths)
    if text is None:
        return None
    return _finite(text.replace(",", "."))
