"""In-process remote table, used for demos and tests."""

import copy
from datetime import datetime, timedelta, timezone

from tripstore.application.interfaces import RemoteCollectionClient
from tripstore.domain.entities import SERVER_OWNED_FIELDS, Record
from tripstore.domain.exceptions import RecordNotFoundError, RemoteError, RemoteUnavailableError


class InMemoryCollectionClient(RemoteCollectionClient):
    """Keeps rows in a list and behaves like a remote table.

    ``reachable = False`` makes every call raise ``RemoteUnavailableError``.
    ``fail_on`` lists operation names (``insert``, ``update`` ...) that raise
    ``RemoteError`` instead. ``calls`` records every call made.
    """

    def __init__(self, collection: str, rows: list[Record] | None = None):
        super().__init__(collection)
        self._rows: list[Record] = []
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.reachable = True
        self.fail_on: set[str] = set()
        self.calls: list[tuple[str, str | None]] = []
        for row in rows or []:
            self._rows.insert(0, self._stamp(dict(row), created=True))

    @property
    def rows(self) -> list[Record]:
        return copy.deepcopy(self._rows)

    def _tick(self) -> str:
        # monotonic timestamps keep newest-first ordering stable
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def _stamp(self, row: Record, created: bool = False) -> Record:
        now = self._tick()
        if created:
            row["created_at"] = now
        row["updated_at"] = now
        return row

    def _check(self, operation: str, record_id: str | None = None) -> None:
        self.calls.append((operation, record_id))
        if not self.reachable:
            raise RemoteUnavailableError(self.collection, "connection refused")
        if operation in self.fail_on:
            raise RemoteError(self.collection, f"{operation} rejected", status_code=400)

    async def list_records(self) -> list[Record]:
        self._check("list")
        return copy.deepcopy(self._rows)

    async def insert(self, record: Record) -> Record:
        record_id = record.get("id")
        self._check("insert", record_id)
        if not record_id:
            raise RemoteError(self.collection, "record has no id", status_code=400)
        if any(row["id"] == record_id for row in self._rows):
            raise RemoteError(self.collection, f"duplicate key '{record_id}'", status_code=409)
        row = {k: v for k, v in copy.deepcopy(record).items() if k not in SERVER_OWNED_FIELDS}
        self._rows.insert(0, self._stamp(row, created=True))
        return copy.deepcopy(self._rows[0])

    async def update(self, record_id: str, changes: Record) -> Record:
        self._check("update", record_id)
        for row in self._rows:
            if row["id"] == record_id:
                row.update({k: v for k, v in copy.deepcopy(changes).items() if k not in SERVER_OWNED_FIELDS and k != "id"})
                self._stamp(row)
                return copy.deepcopy(row)
        raise RecordNotFoundError(self.collection, record_id)

    async def remove(self, record_id: str) -> None:
        self._check("remove", record_id)
        self._rows = [row for row in self._rows if row["id"] != record_id]
