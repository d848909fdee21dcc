"""Record sanitation applied before every document-store write."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Mapping


def _clean_list(values: List[Any]) -> List[Any]:
    cleaned: List[Any] = []
    for item in values:
        if item is None:
            continue
        if isinstance(item, Mapping):
            nested = clean_for_store(item)
            if nested:
                cleaned.append(nested)
            continue
        cleaned.append(item.value if isinstance(item, Enum) else item)
    return cleaned


def clean_for_store(data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Return a copy of ``data`` that the document store will accept.

    - keys whose value is ``None`` are dropped
    - mappings are cleaned recursively and dropped when they end up empty
    - lists and tuples lose their ``None`` items and are dropped when empty
    - enum members are replaced by their value

    Empty strings and datetimes are kept as-is.
    """
    cleaned: Dict[str, Any] = {}
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, Mapping):
            nested = clean_for_store(value)
            if nested:
                cleaned[key] = nested
        elif isinstance(value, (list, tuple)):
            items = _clean_list(list(value))
            if items:
                cleaned[key] = items
        elif isinstance(value, Enum):
            cleaned[key] = value.value
        else:
            cleaned[key] = value
    return cleaned


__all__ = ["clean_for_store"]
