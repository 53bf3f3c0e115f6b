"""Device-local snapshot cache for one collection.

Two independent slots per collection:

* ``{collection}.snapshot``: what this device last saw on the remote side.
* ``{collection}.customDefault``: the baseline saved by Save-As-Default,
  guarded by the ``{collection}.customDefault.exists`` flag.

Losing the cache must never break the store, so every failure is logged and
reported through the return value instead of being raised.
"""

import json
import logging
from datetime import datetime, timezone

from tripstore.application.interfaces import KeyValueStore
from tripstore.domain.entities import Record
from tripstore.domain.exceptions import LocalPersistenceError

logger = logging.getLogger(__name__)

LAST_SYNC_KEY = "lastSync"


class SnapshotCache:
    """Best-effort persistence of collection snapshots and custom defaults."""

    def __init__(self, collection: str, store: KeyValueStore):
        self._collection = collection
        self._store = store

    @property
    def collection(self) -> str:
        return self._collection

    @property
    def snapshot_key(self) -> str:
        return f"{self._collection}.snapshot"

    @property
    def custom_default_key(self) -> str:
        return f"{self._collection}.customDefault"

    @property
    def custom_default_flag_key(self) -> str:
        return f"{self._collection}.customDefault.exists"

    # ── Snapshot ────────────────────────────────────────────────────

    def save_snapshot(self, records: list[Record]) -> bool:
        """Persist the full collection. Returns False if the write failed."""
        return self._write(self.snapshot_key, records)

    def load_snapshot(self) -> list[Record] | None:
        return self._read(self.snapshot_key)

    def clear_snapshot(self) -> bool:
        return self._delete(self.snapshot_key)

    # ── Custom default ──────────────────────────────────────────────

    def has_custom_default(self) -> bool:
        try:
            flag = self._store.get(self.custom_default_flag_key)
            if flag != "true":
                return False
            return self._store.get(self.custom_default_key) is not None
        except LocalPersistenceError as exc:
            logger.error("Could not check custom default for %s: %s", self._collection, exc)
            return False

    def save_as_custom_default(self, records: list[Record]) -> bool:
        if not self._write(self.custom_default_key, records):
            return False
        try:
            self._store.set(self.custom_default_flag_key, "true")
            self._store.set(LAST_SYNC_KEY, datetime.now(timezone.utc).isoformat())
        except LocalPersistenceError as exc:
            logger.error("Could not flag custom default for %s: %s", self._collection, exc)
            return False
        return True

    def load_custom_default(self) -> list[Record] | None:
        if not self.has_custom_default():
            return None
        return self._read(self.custom_default_key)

    def clear_custom_default(self) -> bool:
        cleared_flag = self._delete(self.custom_default_flag_key)
        cleared_data = self._delete(self.custom_default_key)
        return cleared_flag and cleared_data

    # ── Helpers ─────────────────────────────────────────────────────

    def _write(self, key: str, records: list[Record]) -> bool:
        try:
            payload = json.dumps(records, ensure_ascii=False, default=str)
            self._store.set(key, payload)
        except (TypeError, ValueError) as exc:
            logger.error("Could not serialize %s for %s: %s", key, self._collection, exc)
            return False
        except LocalPersistenceError as exc:
            logger.error("Could not save %s: %s", key, exc)
            return False
        logger.debug("Saved %d records to %s", len(records), key)
        return True

    def _read(self, key: str) -> list[Record] | None:
        try:
            raw = self._store.get(key)
        except LocalPersistenceError as exc:
            logger.error("Could not read %s: %s", key, exc)
            return None
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.error("Corrupt local data in %s: %s", key, exc)
            return None
        if not isinstance(data, list):
            logger.error("Local data in %s is not a record list", key)
            return None
        return data

    def _delete(self, key: str) -> bool:
        try:
            self._store.delete(key)
        except LocalPersistenceError as exc:
            logger.error("Could not clear %s: %s", key, exc)
            return False
        return True
