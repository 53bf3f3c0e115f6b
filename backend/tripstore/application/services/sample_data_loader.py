"""Load every built-in sample dataset into the remote tables in one go."""

import logging

from tripstore.application.collections import SEED_ORDER
from tripstore.application.interfaces import SampleDataRepository
from tripstore.application.services.collection_registry import CollectionRegistry
from tripstore.domain.entities import SampleLoadStatus
from tripstore.domain.exceptions import CollectionStoreError

logger = logging.getLogger(__name__)


class SampleDataLoader:
    """Inserts all samples in foreign-key safe order.

    Unlike bootstrap seeding, a failing record does not stop the run: it is
    counted and the loader moves on to the next record.
    """

    def __init__(self, registry: CollectionRegistry, samples: SampleDataRepository):
        self._registry = registry
        self._samples = samples

    async def load_all(self) -> list[SampleLoadStatus]:
        statuses: list[SampleLoadStatus] = []
        for name in SEED_ORDER:
            store = self._registry.get(name)
            status = SampleLoadStatus(collection=name)
            for record in self._samples.load(name):
                try:
                    await store.insert(record)
                    status.inserted += 1
                except CollectionStoreError as exc:
                    status.failed += 1
                    status.error = str(exc)
                    logger.warning("Sample %s record %s not loaded: %s", name, record.get("id"), exc)
            statuses.append(status)
            logger.info("Loaded %d sample %s (%d failed)", status.inserted, name, status.failed)

        for name in SEED_ORDER:
            await self._registry.get(name).refetch()
        return statuses
