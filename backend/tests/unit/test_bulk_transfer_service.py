"""Unit tests for the BulkTransferService."""

import asyncio
import json

import pytest

from tripstore.application.collections import get_collection_definition
from tripstore.application.interfaces import SampleDataRepository
from tripstore.application.services import BulkTransferService, CollectionStore, SnapshotCache
from tripstore.domain.entities import Record, TransferOperation, TransferPhase
from tripstore.domain.exceptions import (
    BulkTransferError,
    CollectionBlockedError,
    InvalidFormatError,
    RemoteError,
)
from tripstore.infrastructure.remote import InMemoryCollectionClient
from tripstore.infrastructure.storage import InMemoryKeyValueStore


class FakeSampleDataRepository(SampleDataRepository):
    def __init__(self, datasets: dict[str, list[Record]]):
        self._datasets = datasets

    def load(self, collection: str) -> list[Record]:
        return [dict(r) for r in self._datasets.get(collection, [])]


class RejectingClient(InMemoryCollectionClient):
    """Rejects inserts of one specific record id."""

    def __init__(self, collection: str, reject_id: str):
        super().__init__(collection)
        self.reject_id = reject_id

    async def insert(self, record: Record) -> Record:
        if record.get("id") == self.reject_id:
            self.calls.append(("insert", record.get("id")))
            raise RemoteError(self.collection, "violates check constraint", status_code=400)
        return await super().insert(record)


SAMPLES = FakeSampleDataRepository(
    {
        "destinations": [
            {"id": "great-wall", "name": "Great Wall", "description": "d"},
            {"id": "forbidden-city", "name": "Forbidden City", "description": "d"},
        ]
    }
)


def _store(remote: InMemoryCollectionClient, kv: InMemoryKeyValueStore | None = None) -> CollectionStore:
    cache = SnapshotCache(remote.collection, kv or InMemoryKeyValueStore())
    return CollectionStore(get_collection_definition(remote.collection), remote, cache)


async def _store_with_two_records() -> tuple[CollectionStore, InMemoryCollectionClient]:
    remote = InMemoryCollectionClient("destinations")
    store = _store(remote)
    await store.insert({"id": "old-1", "name": "Old 1", "description": "d"})
    await store.insert({"id": "old-2", "name": "Old 2", "description": "d"})
    remote.calls.clear()
    return store, remote


@pytest.fixture
def service() -> BulkTransferService:
    return BulkTransferService(SAMPLES)


# ── Import ──


@pytest.mark.asyncio
async def test_import_replaces_collection(service: BulkTransferService):
    store, remote = await _store_with_two_records()
    payload = json.dumps([{"id": "x1", "name": "Test", "description": "d"}])

    result = await service.import_records(store, payload)
    records = await store.refetch()

    assert [r["id"] for r in records] == ["x1"]
    assert result.succeeded is True
    assert result.phase == TransferPhase.VERIFIED
    assert (result.removed, result.inserted) == (2, 1)
    assert store.degraded is False
    assert store.state.is_ready


@pytest.mark.asyncio
async def test_import_runs_removals_before_inserts(service: BulkTransferService):
    store, remote = await _store_with_two_records()

    await service.import_records(store, [{"id": "x1", "name": "Test", "description": "d"}])

    operations = [op for op, _ in remote.calls]
    assert operations == ["remove", "remove", "insert", "list"]


@pytest.mark.asyncio
async def test_import_accepts_bytes_and_empty_array(service: BulkTransferService):
    store, remote = await _store_with_two_records()

    result = await service.import_records(store, b"[]")

    assert result.succeeded is True
    assert remote.rows == []
    assert store.records == []


@pytest.mark.parametrize(
    "payload",
    [
        b"not json",
        '{"id": "x1", "name": "Test", "description": "d"}',
        [{"name": "Test", "description": "d"}],
        [{"id": "x1", "name": "Test"}],
        [{"id": "x1", "name": "Test", "description": "d"}, "oops"],
    ],
)
@pytest.mark.asyncio
async def test_invalid_import_payload_makes_no_remote_calls(service: BulkTransferService, payload):
    store, remote = await _store_with_two_records()

    with pytest.raises(InvalidFormatError):
        await service.import_records(store, payload)

    assert remote.calls == []
    assert [r["id"] for r in store.records] == ["old-2", "old-1"]


def test_itinerary_payload_requires_type_and_title():
    definition = get_collection_definition("itinerary_items")

    with pytest.raises(InvalidFormatError, match="title"):
        BulkTransferService.parse_payload(definition, [{"id": "i1", "type": "Flight"}])

    records = BulkTransferService.parse_payload(definition, [{"id": "i1", "type": "Flight", "title": "Fly"}])
    assert records == [{"id": "i1", "type": "Flight", "title": "Fly"}]


@pytest.mark.asyncio
async def test_partial_failure_reports_counts_and_blocks_store(service: BulkTransferService):
    remote = RejectingClient("destinations", reject_id="bad")
    store = _store(remote)
    await store.insert({"id": "old-1", "name": "Old", "description": "d"})

    payload = [
        {"id": "good", "name": "Good", "description": "d"},
        {"id": "bad", "name": "Bad", "description": "d"},
        {"id": "never", "name": "Never", "description": "d"},
    ]
    with pytest.raises(BulkTransferError) as exc_info:
        await service.import_records(store, payload)

    result = exc_info.value.result
    assert result.operation == TransferOperation.IMPORT
    assert result.failed_phase == TransferPhase.SEEDING
    assert result.failed_record_id == "bad"
    assert (result.removed, result.inserted) == (1, 1)
    assert result.succeeded is False
    assert [r["id"] for r in remote.rows] == ["good"]
    assert ("insert", "never") not in remote.calls

    with pytest.raises(CollectionBlockedError):
        await store.insert({"id": "z", "name": "Z"})

    await store.refetch()
    await store.insert({"id": "z", "name": "Z"})


@pytest.mark.asyncio
async def test_blocked_store_rejects_new_import(service: BulkTransferService):
    remote = RejectingClient("destinations", reject_id="bad")
    store = _store(remote)

    with pytest.raises(BulkTransferError):
        await service.import_records(store, [{"id": "bad", "name": "Bad", "description": "d"}])
    with pytest.raises(CollectionBlockedError):
        await service.import_records(store, [{"id": "ok", "name": "Ok", "description": "d"}])


# ── Reset ──


@pytest.mark.asyncio
async def test_reset_restores_sample_dataset(service: BulkTransferService):
    store, remote = await _store_with_two_records()

    result = await service.reset(store)

    assert result.operation == TransferOperation.RESET
    assert result.succeeded is True
    assert {r["id"] for r in store.records} == {"great-wall", "forbidden-city"}


@pytest.mark.asyncio
async def test_concurrent_reset_reaches_same_end_state():
    store, remote = await _store_with_two_records()
    service = BulkTransferService(SAMPLES, concurrent_reset=True)

    result = await service.reset(store)

    assert result.succeeded is True
    assert (result.removed, result.inserted) == (2, 2)
    assert {r["id"] for r in remote.rows} == {"great-wall", "forbidden-city"}


class SlowRejectingClient(RejectingClient):
    """Rejects one id at once; every other insert takes a moment."""

    async def insert(self, record: Record) -> Record:
        if record.get("id") != self.reject_id:
            await asyncio.sleep(0.01)
        return await super().insert(record)


@pytest.mark.asyncio
async def test_failed_concurrent_reset_settles_every_call_before_blocking():
    remote = SlowRejectingClient("destinations", reject_id="bad")
    store = _store(remote)
    samples = FakeSampleDataRepository(
        {
            "destinations": [
                {"id": "ok1", "name": "Ok 1", "description": "d"},
                {"id": "bad", "name": "Bad", "description": "d"},
                {"id": "ok2", "name": "Ok 2", "description": "d"},
            ]
        }
    )
    service = BulkTransferService(samples, concurrent_reset=True)

    with pytest.raises(BulkTransferError) as exc_info:
        await service.reset(store)

    result = exc_info.value.result
    assert result.failed_phase == TransferPhase.SEEDING
    assert result.failed_record_id == "bad"
    assert result.inserted == 2
    assert str(exc_info.value).startswith("reset of 'destinations' failed during seeding phase")
    assert {r["id"] for r in store.records} == {"ok1", "ok2"}
    assert store.blocked_by is result

    await asyncio.sleep(0.05)
    assert result.inserted == 2
    assert {r["id"] for r in store.records} == {"ok1", "ok2"}


@pytest.mark.asyncio
async def test_reset_reports_unreachable_verify_as_failure(service: BulkTransferService):
    store, remote = await _store_with_two_records()
    original_list = remote.list_records

    async def unreachable_list():
        remote.reachable = False
        return await original_list()

    remote.list_records = unreachable_list

    with pytest.raises(BulkTransferError) as exc_info:
        await service.reset(store)
    assert exc_info.value.result.inserted == 2
    assert store.degraded is True


# ── Save-as-default & export ──


@pytest.mark.asyncio
async def test_save_as_default_round_trip_without_remote_calls(service: BulkTransferService):
    kv = InMemoryKeyValueStore()
    destinations_remote = InMemoryCollectionClient("destinations")
    itinerary_remote = InMemoryCollectionClient("itinerary_items")
    destinations = _store(destinations_remote, kv)
    itinerary = _store(itinerary_remote, kv)
    await destinations.insert({"id": "d1", "name": "D1", "description": "d"})
    await destinations.insert({"id": "d2", "name": "D2", "description": "d"})
    await itinerary.insert({"id": "i1", "type": "Other", "title": "I1"})
    calls_before = (len(destinations_remote.calls), len(itinerary_remote.calls))

    result = service.save_as_default([destinations, itinerary])

    assert result.succeeded is True
    assert result.saved == {"destinations": 2, "itinerary_items": 1}
    assert destinations.snapshot_cache.load_custom_default() == destinations.records
    assert itinerary.snapshot_cache.load_custom_default() == itinerary.records
    assert (len(destinations_remote.calls), len(itinerary_remote.calls)) == calls_before


@pytest.mark.asyncio
async def test_save_as_default_reports_local_write_failure(service: BulkTransferService):
    kv = InMemoryKeyValueStore()
    store = _store(InMemoryCollectionClient("destinations"), kv)
    await store.insert({"id": "d1", "name": "D1", "description": "d"})
    kv.writable = False

    result = service.save_as_default([store])

    assert result.succeeded is False
    assert result.failed == ["destinations"]


@pytest.mark.asyncio
async def test_export_is_pretty_printed_and_reproducible(service: BulkTransferService):
    store, _ = await _store_with_two_records()

    exported = service.export_records(store)

    assert exported == json.dumps(store.records, indent=2, ensure_ascii=False)
    assert exported == service.export_records(store)
    assert json.loads(exported)[0]["id"] == "old-2"
