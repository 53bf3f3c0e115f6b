"""Unit tests for the BootstrapReconciler."""

import pytest

from tripstore.application.collections import get_collection_definition
from tripstore.application.interfaces import SampleDataRepository
from tripstore.application.services import BootstrapReconciler, CollectionStore, SnapshotCache
from tripstore.domain.entities import BootstrapPhase, Record
from tripstore.domain.exceptions import RemoteError
from tripstore.infrastructure.remote import InMemoryCollectionClient
from tripstore.infrastructure.storage import InMemoryKeyValueStore


class FakeSampleDataRepository(SampleDataRepository):
    """In-memory sample datasets for unit testing."""

    def __init__(self, datasets: dict[str, list[Record]]):
        self._datasets = datasets

    def load(self, collection: str) -> list[Record]:
        return [dict(r) for r in self._datasets.get(collection, [])]


SAMPLES = FakeSampleDataRepository(
    {
        "destinations": [
            {"id": "great-wall", "name": "Great Wall", "description": "Ancient fortification"},
            {"id": "forbidden-city", "name": "Forbidden City", "description": "Imperial palace"},
            {"id": "li-river", "name": "Li River", "description": "Karst scenery"},
        ]
    }
)


@pytest.fixture
def remote() -> InMemoryCollectionClient:
    return InMemoryCollectionClient("destinations")


@pytest.fixture
def cache() -> SnapshotCache:
    return SnapshotCache("destinations", InMemoryKeyValueStore())


@pytest.fixture
def store(remote: InMemoryCollectionClient, cache: SnapshotCache) -> CollectionStore:
    return CollectionStore(get_collection_definition("destinations"), remote, cache)


def _inserted_ids(remote: InMemoryCollectionClient) -> list[str]:
    return [record_id for op, record_id in remote.calls if op == "insert"]


@pytest.mark.asyncio
async def test_empty_remote_is_seeded_in_order_exactly_once(
    store: CollectionStore, remote: InMemoryCollectionClient
):
    reconciler = BootstrapReconciler(SAMPLES, seed_on_empty=True)

    outcome = await reconciler.reconcile(store)
    calls_after_first_run = len(remote.calls)
    second = await reconciler.reconcile(store)

    assert outcome.phase == BootstrapPhase.SEEDED
    assert outcome.seeded == 3
    assert outcome.source == "sample"
    assert _inserted_ids(remote) == ["great-wall", "forbidden-city", "li-river"]
    assert second.attempted is False
    assert len(remote.calls) == calls_after_first_run


@pytest.mark.asyncio
async def test_seeded_records_carry_server_timestamps(remote: InMemoryCollectionClient, store: CollectionStore):
    samples = FakeSampleDataRepository(
        {
            "destinations": [
                {"id": "great-wall", "name": "Great Wall", "description": "d"},
                {"id": "forbidden-city", "name": "Forbidden City", "description": "d"},
            ]
        }
    )

    await BootstrapReconciler(samples, seed_on_empty=True).reconcile(store)
    records = await store.refetch()

    assert {r["id"] for r in records} == {"great-wall", "forbidden-city"}
    assert all(r["created_at"] and r["updated_at"] for r in records)
    assert store.bootstrap_phase == BootstrapPhase.SEEDED


@pytest.mark.asyncio
async def test_populated_remote_is_left_alone(store: CollectionStore, remote: InMemoryCollectionClient):
    await remote.insert({"id": "existing", "name": "Existing"})
    remote.calls.clear()

    outcome = await BootstrapReconciler(SAMPLES, seed_on_empty=True).reconcile(store)

    assert outcome.phase == BootstrapPhase.POPULATED
    assert remote.calls == [("list", None)]
    assert [r["id"] for r in store.records] == ["existing"]


@pytest.mark.asyncio
async def test_custom_default_takes_precedence_over_sample(
    store: CollectionStore, cache: SnapshotCache, remote: InMemoryCollectionClient
):
    cache.save_as_custom_default([{"id": "mine", "name": "Mine", "description": "d"}])

    outcome = await BootstrapReconciler(SAMPLES, seed_on_empty=True).reconcile(store)

    assert outcome.source == "custom_default"
    assert _inserted_ids(remote) == ["mine"]


@pytest.mark.asyncio
async def test_seeding_disabled_leaves_collection_empty(store: CollectionStore, remote: InMemoryCollectionClient):
    outcome = await BootstrapReconciler(SAMPLES, seed_on_empty=False).reconcile(store)

    assert outcome.phase == BootstrapPhase.POPULATED
    assert _inserted_ids(remote) == []
    assert store.records == []


@pytest.mark.asyncio
async def test_unreachable_remote_serves_sample_in_memory(store: CollectionStore, remote: InMemoryCollectionClient):
    remote.reachable = False

    outcome = await BootstrapReconciler(SAMPLES, seed_on_empty=True).reconcile(store)

    assert outcome.phase == BootstrapPhase.DEGRADED_LOCAL
    assert outcome.source == "sample"
    assert store.degraded is True
    assert [r["id"] for r in store.records] == ["great-wall", "forbidden-city", "li-river"]
    assert _inserted_ids(remote) == []


@pytest.mark.asyncio
async def test_unreachable_remote_prefers_snapshot(
    store: CollectionStore, remote: InMemoryCollectionClient, cache: SnapshotCache
):
    cache.save_snapshot([{"id": "cached", "name": "Cached"}])
    remote.reachable = False

    outcome = await BootstrapReconciler(SAMPLES, seed_on_empty=True).reconcile(store)

    assert outcome.source == "snapshot"
    assert [r["id"] for r in store.records] == ["cached"]


@pytest.mark.asyncio
async def test_seed_failure_aborts_and_serves_sample_locally(
    store: CollectionStore, remote: InMemoryCollectionClient
):
    remote.fail_on.add("insert")

    outcome = await BootstrapReconciler(SAMPLES, seed_on_empty=True).reconcile(store)

    assert outcome.phase == BootstrapPhase.DEGRADED_LOCAL
    assert outcome.seeded == 0
    assert outcome.error is not None
    assert _inserted_ids(remote) == ["great-wall"]
    assert store.degraded is True
    assert len(store.records) == 3


@pytest.mark.asyncio
async def test_rejected_probe_can_be_retried(store: CollectionStore, remote: InMemoryCollectionClient):
    reconciler = BootstrapReconciler(SAMPLES, seed_on_empty=True)
    remote.fail_on.add("list")

    with pytest.raises(RemoteError):
        await reconciler.reconcile(store)
    assert reconciler.has_run("destinations") is False

    remote.fail_on.clear()
    outcome = await reconciler.reconcile(store)
    assert outcome.phase == BootstrapPhase.SEEDED
