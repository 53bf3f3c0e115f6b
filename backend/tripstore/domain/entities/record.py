"""Domain primitives for collection records.

A record is a plain ``dict`` mirroring one row of a remote table. The
``UNSET`` sentinel marks a key that is present in a partial payload but was
never filled in, so it can be told apart from an explicit ``None`` (clear).
"""

from typing import Any
from uuid import uuid4

Record = dict[str, Any]

# Ellipsis means "not provided"; None means "clear"
UNSET: Any = ...

SERVER_OWNED_FIELDS = frozenset({"created_at", "updated_at"})


def new_record_id() -> str:
    """Return a fresh client-side record id."""
    return str(uuid4())


def record_version(record: Record) -> str | None:
    """Return the version marker of a record (its server ``updated_at``)."""
    value = record.get("updated_at")
    return str(value) if value is not None else None
