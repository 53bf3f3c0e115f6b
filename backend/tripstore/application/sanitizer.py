"""Normalizes partial records before they cross the remote boundary.

Creation and mutation follow different rules:

* create: omitted and blank fields are dropped so remote column defaults apply.
* update: omitted and blank fields are written through as ``None`` so that
  "clear this field" has an observable effect.

All functions here are pure.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from tripstore.domain.entities import SERVER_OWNED_FIELDS, UNSET, Record


def is_blank(value: Any) -> bool:
    """True for values the create path drops: ``UNSET`` and the empty string."""
    return value is UNSET or (isinstance(value, str) and value == "")


def for_create(partial: Mapping[str, Any]) -> Record:
    """Return a create payload: unset, blank and server-owned keys removed.

    ``None``, ``0``, ``False`` and empty containers are kept as-is.
    """
    return {
        key: value
        for key, value in partial.items()
        if not is_blank(value) and key not in SERVER_OWNED_FIELDS
    }


def for_update(partial: Mapping[str, Any]) -> Record:
    """Return an update payload: unset and blank values become ``None``."""
    return {
        key: (None if is_blank(value) else value)
        for key, value in partial.items()
    }


def strip_columns(payload: Mapping[str, Any], columns: Iterable[str]) -> Record:
    """Drop columns the remote table does not have."""
    excluded = frozenset(columns)
    return {key: value for key, value in payload.items() if key not in excluded}
