"""First fetch of a collection plus one-off seeding.

Per session and per collection:

* remote unreachable → serve the local snapshot, else the built-in sample,
  in memory only;
* remote has rows → nothing to do;
* remote is empty → insert the custom default (or the built-in sample)
  one record at a time, then refetch.

The collection is marked as attempted before the first suspension point, so
a second caller racing the first never seeds twice.
"""

import logging
from dataclasses import dataclass

from tripstore.application.interfaces import SampleDataRepository
from tripstore.application.services.collection_store import CollectionStore
from tripstore.config import get_settings
from tripstore.domain.entities import BootstrapPhase, Record
from tripstore.domain.exceptions import CollectionStoreError
from tripstore.infrastructure.logging.colored_logger import TransferLogger, TransferStage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BootstrapOutcome:
    collection: str
    phase: BootstrapPhase
    attempted: bool
    seeded: int = 0
    source: str | None = None
    error: str | None = None


class BootstrapReconciler:
    """Runs the bootstrap sequence at most once per collection."""

    def __init__(self, samples: SampleDataRepository, seed_on_empty: bool | None = None):
        """``seed_on_empty=None`` reads ``bootstrap_seed_on_empty`` from the
        settings on every run, so runtime changes reach later opens."""
        self._samples = samples
        self._seed_on_empty = seed_on_empty
        self._attempted: set[str] = set()
        self._log = TransferLogger(__name__)

    def has_run(self, collection: str) -> bool:
        return collection in self._attempted

    def _seeding_enabled(self) -> bool:
        if self._seed_on_empty is not None:
            return self._seed_on_empty
        return get_settings().bootstrap_seed_on_empty

    async def reconcile(self, store: CollectionStore) -> BootstrapOutcome:
        name = store.name
        if name in self._attempted:
            return BootstrapOutcome(name, store.bootstrap_phase, attempted=False)
        self._attempted.add(name)

        store.set_bootstrap_phase(BootstrapPhase.PROBING)
        self._log.step_start(TransferStage.BOOTSTRAP, f"Probing {name}")
        try:
            records = await store.fetch()
        except CollectionStoreError:
            # rejected outright; let a later call try again
            self._attempted.discard(name)
            store.set_bootstrap_phase(BootstrapPhase.UNINITIALIZED)
            raise

        if store.degraded:
            return self._serve_local(store)

        if records:
            store.set_bootstrap_phase(BootstrapPhase.POPULATED)
            self._log.step_complete(TransferStage.BOOTSTRAP, f"{name} already populated", records=len(records))
            return BootstrapOutcome(name, BootstrapPhase.POPULATED, attempted=True)

        dataset, source = self._seed_dataset(store)
        seed_on_empty = self._seeding_enabled()
        if not seed_on_empty or not dataset:
            store.set_bootstrap_phase(BootstrapPhase.POPULATED)
            logger.info("Leaving %s empty (seeding %s)", name, "disabled" if not seed_on_empty else "has no data")
            return BootstrapOutcome(name, BootstrapPhase.POPULATED, attempted=True)

        return await self._seed(store, dataset, source)

    def _seed_dataset(self, store: CollectionStore) -> tuple[list[Record], str]:
        cache = store.snapshot_cache
        if cache is not None:
            custom = cache.load_custom_default()
            if custom is not None:
                return custom, "custom_default"
        return self._samples.load(store.name), "sample"

    async def _seed(self, store: CollectionStore, dataset: list[Record], source: str) -> BootstrapOutcome:
        name = store.name
        seeded = 0
        try:
            with self._log.timed_step(TransferStage.SEEDING, f"Seeding {name} from {source}", records=len(dataset)):
                for record in dataset:
                    await store.insert(record)
                    seeded += 1
        except CollectionStoreError as exc:
            store.serve_in_memory(self._samples.load(name))
            store.set_bootstrap_phase(BootstrapPhase.DEGRADED_LOCAL)
            self._log.counts(collection=name, seeded=seeded, planned=len(dataset))
            return BootstrapOutcome(
                name, BootstrapPhase.DEGRADED_LOCAL, attempted=True,
                seeded=seeded, source=source, error=str(exc),
            )

        await store.refetch()
        store.set_bootstrap_phase(BootstrapPhase.SEEDED)
        self._log.step_complete(TransferStage.COMPLETE, f"Seeded {name}", records=seeded)
        return BootstrapOutcome(name, BootstrapPhase.SEEDED, attempted=True, seeded=seeded, source=source)

    def _serve_local(self, store: CollectionStore) -> BootstrapOutcome:
        name = store.name
        cache = store.snapshot_cache
        snapshot = cache.load_snapshot() if cache is not None else None
        if snapshot is not None:
            source = "snapshot"
        else:
            store.serve_in_memory(self._samples.load(name))
            source = "sample"
        store.set_bootstrap_phase(BootstrapPhase.DEGRADED_LOCAL)
        self._log.step_error(TransferStage.BOOTSTRAP, f"{name} unreachable, serving {source} locally")
        return BootstrapOutcome(name, BootstrapPhase.DEGRADED_LOCAL, attempted=True, source=source)
