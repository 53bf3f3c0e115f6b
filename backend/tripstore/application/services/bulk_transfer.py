"""Whole-collection import, reset, export and save-as-default.

Import and reset are a two-phase replace: remove every record held before the
operation (``clearing``), insert every new record (``seeding``), then refetch
(``verified``). Nothing is rolled back; a failure leaves the collection
partially replaced, records the counts in the ``BulkTransferResult`` and
blocks further mutations until the next successful fetch.
"""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable, Iterable
from functools import partial
from typing import Any

from tripstore.application.interfaces import SampleDataRepository
from tripstore.application.services.collection_store import CollectionStore
from tripstore.domain.entities import (
    BulkTransferResult,
    CollectionDefinition,
    Record,
    SaveAsDefaultResult,
    TransferOperation,
    TransferPhase,
)
from tripstore.domain.exceptions import (
    BulkTransferError,
    CollectionStoreError,
    InvalidFormatError,
    RemoteUnavailableError,
)
from tripstore.infrastructure.logging.colored_logger import TransferLogger, TransferStage

logger = logging.getLogger(__name__)


def _is_missing(record: Record, key: str) -> bool:
    value = record.get(key)
    return value is None or (isinstance(value, str) and not value.strip())


class BulkTransferService:
    """Import, reset, export and save-as-default over collection stores."""

    def __init__(self, samples: SampleDataRepository, concurrent_reset: bool = False):
        self._samples = samples
        self._concurrent_reset = concurrent_reset
        self._log = TransferLogger(__name__)

    # ── Payload validation ──────────────────────────────────────────

    @staticmethod
    def parse_payload(definition: CollectionDefinition, payload: Any) -> list[Record]:
        """Decode and shape-check an import payload. No remote calls are made.

        Accepts UTF-8 JSON (bytes or str) or an already decoded value. Only
        the first element is checked for ``id`` plus the collection's
        required fields.
        """
        name = definition.name
        if isinstance(payload, (bytes, bytearray)):
            try:
                payload = payload.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise InvalidFormatError(name, "payload is not valid UTF-8") from exc
        if isinstance(payload, str):
            try:
                payload = json.loads(payload)
            except json.JSONDecodeError as exc:
                raise InvalidFormatError(name, f"not valid JSON ({exc.msg})") from exc

        if not isinstance(payload, list):
            raise InvalidFormatError(name, f"expected an array of records, got {type(payload).__name__}")
        if not all(isinstance(item, dict) for item in payload):
            raise InvalidFormatError(name, "every element must be an object")

        if payload:
            first = payload[0]
            missing = [key for key in ("id", *definition.required_fields) if _is_missing(first, key)]
            if missing:
                raise InvalidFormatError(name, f"first record is missing {', '.join(missing)}")
        return [dict(item) for item in payload]

    # ── Replace operations ──────────────────────────────────────────

    async def import_records(self, store: CollectionStore, payload: Any) -> BulkTransferResult:
        """Replace the collection with the records in ``payload``."""
        records = self.parse_payload(store.definition, payload)
        return await self._replace(store, records, TransferOperation.IMPORT, concurrent=False)

    async def reset(self, store: CollectionStore) -> BulkTransferResult:
        """Replace the collection with its built-in sample dataset."""
        records = self._samples.load(store.name)
        return await self._replace(store, records, TransferOperation.RESET, concurrent=self._concurrent_reset)

    async def _replace(
        self,
        store: CollectionStore,
        records: list[Record],
        operation: TransferOperation,
        concurrent: bool,
    ) -> BulkTransferResult:
        store.ensure_writable(operation.value)

        previous_ids = [r["id"] for r in store.records if r.get("id") is not None]
        result = BulkTransferResult(
            operation=operation,
            collection=store.name,
            planned_removals=len(previous_ids),
            planned_inserts=len(records),
        )
        self._log.step_start(
            TransferStage.BOOTSTRAP, f"{operation.value} {store.name}",
            remove=len(previous_ids), insert=len(records),
        )

        try:
            result.advance(TransferPhase.CLEARING)
            with self._log.timed_step(TransferStage.CLEARING, f"Removing {len(previous_ids)} {store.name}"):
                await self._run_phase(
                    [(rid, partial(store.remove, rid)) for rid in previous_ids], result, "removed", concurrent,
                )

            result.advance(TransferPhase.SEEDING)
            with self._log.timed_step(TransferStage.SEEDING, f"Inserting {len(records)} {store.name}"):
                await self._run_phase(
                    [(r.get("id"), partial(store.insert, r)) for r in records], result, "inserted", concurrent,
                )

            with self._log.timed_step(TransferStage.VERIFY, f"Refetching {store.name}"):
                await store.refetch()
            if store.degraded:
                raise RemoteUnavailableError(store.name, "refetch fell back to the local snapshot")
        except CollectionStoreError as exc:
            result.mark_failed(exc, record_id=result.failed_record_id)
            store.block(result)
            self._log.counts(removed=result.removed, inserted=result.inserted, failed_phase=result.phase.value)
            raise BulkTransferError(result) from exc

        result.mark_verified()
        self._log.counts(removed=result.removed, inserted=result.inserted)
        return result

    @staticmethod
    async def _run_phase(
        calls: list[tuple[Any, Callable[[], Awaitable[Any]]]],
        result: BulkTransferResult,
        counter: str,
        concurrent: bool,
    ) -> None:
        """Run each call, counting completions on ``result``.

        Sequential mode stops at the first failure. Concurrent mode starts
        every call at once and waits for all of them to settle before
        raising the first failure in call order, so the counters are final
        when the caller sees the error.
        """

        async def counted(call: Callable[[], Awaitable[Any]]) -> None:
            await call()
            setattr(result, counter, getattr(result, counter) + 1)

        if concurrent:
            outcomes = await asyncio.gather(
                *(counted(call) for _, call in calls), return_exceptions=True
            )
            for (record_id, _), outcome in zip(calls, outcomes):
                if isinstance(outcome, BaseException):
                    result.failed_record_id = record_id
                    raise outcome
            return

        for record_id, call in calls:
            try:
                await counted(call)
            except CollectionStoreError:
                result.failed_record_id = record_id
                raise

    # ── Local-only operations ───────────────────────────────────────

    def save_as_default(self, stores: Iterable[CollectionStore]) -> SaveAsDefaultResult:
        """Save each store's current records as its custom default. No remote calls."""
        result = SaveAsDefaultResult()
        for store in stores:
            cache = store.snapshot_cache
            records = store.records
            if cache is not None and cache.save_as_custom_default(records):
                result.saved[store.name] = len(records)
            else:
                result.failed.append(store.name)
        if result.failed:
            self._log.step_error(TransferStage.SNAPSHOT, f"Could not save defaults for {', '.join(result.failed)}")
        else:
            self._log.step_complete(TransferStage.SNAPSHOT, "Saved custom defaults", **result.saved)
        return result

    @staticmethod
    def export_records(store: CollectionStore) -> str:
        """Pretty-printed JSON of the records currently held in memory."""
        return json.dumps(store.records, indent=2, ensure_ascii=False, default=str)
