"""The single in-memory source of truth for one collection.

The store composes the record sanitizer, a remote collection client and an
optional snapshot cache. Reads go to the remote table; only ``fetch`` /
``refetch`` fall back to the local snapshot, and only when the remote side is
unreachable. Every state change is pushed to subscribers as an immutable
``CollectionState``.

The in-memory list reflects operations in the order they *complete*. Callers
that fire overlapping updates of one record can pass ``expected_version`` to
turn a silent last-writer-wins race into a ``ConflictError``.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from tripstore.application.interfaces import RemoteCollectionClient
from tripstore.application.sanitizer import for_create, for_update, is_blank, strip_columns
from tripstore.application.services.snapshot_cache import SnapshotCache
from tripstore.domain.entities import (
    SERVER_OWNED_FIELDS,
    BootstrapPhase,
    BulkTransferResult,
    CollectionDefinition,
    CollectionState,
    LoadState,
    Record,
    new_record_id,
    record_version,
)
from tripstore.domain.exceptions import (
    CollectionBlockedError,
    CollectionStoreError,
    ConflictError,
    RemoteUnavailableError,
)

logger = logging.getLogger(__name__)

StateListener = Callable[[CollectionState], None]


def _dedupe(records: Iterable[Record]) -> list[Record]:
    """Copy records, keeping the first occurrence of every id."""
    seen: set[Any] = set()
    result: list[Record] = []
    for record in records:
        record_id = record.get("id")
        if record_id is not None:
            if record_id in seen:
                continue
            seen.add(record_id)
        result.append(dict(record))
    return result


class CollectionStore:
    """Stateful, subscribable container for one named collection."""

    def __init__(
        self,
        definition: CollectionDefinition,
        remote: RemoteCollectionClient,
        snapshot_cache: SnapshotCache | None = None,
    ):
        self._definition = definition
        self._remote = remote
        self._cache = snapshot_cache
        self._records: list[Record] = []
        self._load_state = LoadState.IDLE
        self._degraded = False
        self._last_error: str | None = None
        self._bootstrap_phase = BootstrapPhase.UNINITIALIZED
        self._blocked_by: BulkTransferResult | None = None
        self._has_fetched = False
        self._revision = 0
        self._listeners: list[StateListener] = []

    # ── Introspection ───────────────────────────────────────────────

    @property
    def name(self) -> str:
        return self._definition.name

    @property
    def definition(self) -> CollectionDefinition:
        return self._definition

    @property
    def snapshot_cache(self) -> SnapshotCache | None:
        return self._cache

    @property
    def records(self) -> list[Record]:
        return [dict(r) for r in self._records]

    @property
    def degraded(self) -> bool:
        return self._degraded

    @property
    def has_fetched(self) -> bool:
        return self._has_fetched

    @property
    def bootstrap_phase(self) -> BootstrapPhase:
        return self._bootstrap_phase

    @property
    def blocked_by(self) -> BulkTransferResult | None:
        return self._blocked_by

    @property
    def state(self) -> CollectionState:
        return CollectionState(
            collection=self.name,
            records=tuple(dict(r) for r in self._records),
            load_state=self._load_state,
            degraded=self._degraded,
            last_error=self._last_error,
            bootstrap_phase=self._bootstrap_phase,
            blocked_by=self._blocked_by.operation.value if self._blocked_by else None,
            revision=self._revision,
        )

    def find(self, record_id: str) -> Record | None:
        for record in self._records:
            if record.get("id") == record_id:
                return dict(record)
        return None

    # ── Subscriptions ───────────────────────────────────────────────

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        self._revision += 1
        state = self.state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("State listener for %s failed", self.name)

    # ── Reads ───────────────────────────────────────────────────────

    async def fetch(self) -> list[Record]:
        """Replace the in-memory set with the remote list.

        An unreachable remote degrades to the local snapshot (or an empty
        list). Any other remote failure is recorded and re-raised.
        """
        self._load_state = LoadState.LOADING
        self._notify()

        try:
            rows = await self._remote.list_records()
        except RemoteUnavailableError as exc:
            snapshot = self._cache.load_snapshot() if self._cache else None
            logger.warning(
                "Remote %s unreachable, serving %s",
                self.name,
                f"snapshot of {len(snapshot)} records" if snapshot is not None else "empty set",
            )
            self._records = _dedupe(snapshot or [])
            self._degraded = True
            self._last_error = str(exc)
        except CollectionStoreError as exc:
            logger.error("Error fetching %s: %s", self.name, exc)
            self._last_error = str(exc)
            self._load_state = LoadState.READY
            self._notify()
            raise
        else:
            self._records = _dedupe(rows)
            self._degraded = False
            self._last_error = None
            self._blocked_by = None
            self._has_fetched = True
            self._persist_snapshot()
            logger.debug("Fetched %d %s records", len(self._records), self.name)

        self._has_fetched = True
        self._load_state = LoadState.READY
        self._notify()
        return self.records

    async def refetch(self) -> list[Record]:
        """Full replace from the remote side; safe to call at any time."""
        return await self.fetch()

    # ── Mutations ───────────────────────────────────────────────────

    async def insert(self, partial: Mapping[str, Any]) -> Record:
        """Create a record on the remote side and add it to the in-memory set.

        The id is assigned here when the caller did not supply one. Failures
        leave the records untouched and are never retried.
        """
        self.ensure_writable("insert")
        payload = dict(partial)
        if payload.get("id") is None or is_blank(payload["id"]):
            payload["id"] = new_record_id()

        clean = strip_columns(
            for_create(self._definition.prepare(payload)),
            self._definition.unsupported_columns,
        )

        try:
            created = await self._remote.insert(clean)
        except CollectionStoreError as exc:
            self._record_failure("inserting into", exc)
            raise

        self._upsert(created)
        self._last_error = None
        self._persist_snapshot()
        self._notify()
        return dict(created)

    async def update(
        self,
        record_id: str,
        partial: Mapping[str, Any],
        expected_version: str | None = None,
    ) -> Record:
        """Apply ``partial`` to one record; blank fields are written as cleared.

        When ``expected_version`` is given it must match the held record's
        ``updated_at``, otherwise ``ConflictError`` is raised before any
        remote call.
        """
        self.ensure_writable("update")

        if expected_version is not None:
            current = self.find(record_id)
            if current is not None and record_version(current) != expected_version:
                raise ConflictError(
                    self.name, record_id, expected_version, record_version(current)
                )

        logger.debug("Updating %s with ID %s: %s", self.name, record_id, dict(partial))
        clean = strip_columns(
            for_update(self._definition.prepare(dict(partial))),
            (*self._definition.unsupported_columns, *SERVER_OWNED_FIELDS, "id"),
        )

        try:
            updated = await self._remote.update(record_id, clean)
        except CollectionStoreError as exc:
            self._record_failure("updating", exc)
            raise

        self._upsert(updated)
        self._last_error = None
        self._persist_snapshot()
        self._notify()
        return dict(updated)

    async def remove(self, record_id: str) -> None:
        """Delete a record remotely and locally. Missing ids are not an error."""
        self.ensure_writable("remove")

        try:
            await self._remote.remove(record_id)
        except CollectionStoreError as exc:
            self._record_failure("deleting from", exc)
            raise

        self._records = [r for r in self._records if r.get("id") != record_id]
        self._last_error = None
        self._persist_snapshot()
        self._notify()

    # ── Hooks used by bootstrap and bulk transfer ──────────────────

    def ensure_writable(self, operation: str) -> None:
        """Raise if a failed bulk transfer still blocks this collection."""
        if self._blocked_by is not None:
            raise CollectionBlockedError(self.name, self._blocked_by.operation.value)

    def block(self, result: BulkTransferResult) -> None:
        """Block mutations until the next successful fetch."""
        self._blocked_by = result
        self._last_error = result.error
        self._notify()

    def serve_in_memory(self, records: Iterable[Record]) -> None:
        """Show ``records`` without persisting them anywhere; marks the store degraded."""
        self._records = _dedupe(records)
        self._degraded = True
        self._load_state = LoadState.READY
        self._notify()

    def set_bootstrap_phase(self, phase: BootstrapPhase) -> None:
        self._bootstrap_phase = phase
        self._notify()

    # ── Internals ───────────────────────────────────────────────────

    def _upsert(self, record: Record) -> None:
        record_id = record.get("id")
        for index, existing in enumerate(self._records):
            if existing.get("id") == record_id:
                self._records[index] = dict(record)
                return
        # newest first, matching the remote ordering
        self._records.insert(0, dict(record))

    def _record_failure(self, action: str, exc: CollectionStoreError) -> None:
        logger.error("Error %s %s: %s", action, self.name, exc)
        self._last_error = str(exc)
        self._notify()

    def _persist_snapshot(self) -> None:
        # only a fetched, non-degraded set mirrors the remote table
        if self._cache is None or not self._has_fetched or self._degraded:
            return
        self._cache.save_snapshot(self._records)
