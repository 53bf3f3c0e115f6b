"""One lazily built store per collection name."""

import logging
from collections.abc import Callable

from tripstore.application.collections import COLLECTIONS, get_collection_definition
from tripstore.application.interfaces import KeyValueStore, RemoteCollectionClient
from tripstore.application.services.bootstrap_reconciler import BootstrapReconciler
from tripstore.application.services.collection_store import CollectionStore, StateListener
from tripstore.application.services.snapshot_cache import SnapshotCache

logger = logging.getLogger(__name__)

RemoteFactory = Callable[[str], RemoteCollectionClient]


class CollectionRegistry:
    """Owns every ``CollectionStore`` of the process.

    Stores are created on first access. ``open()`` additionally runs the
    bootstrap sequence the first time a collection is opened. Listeners
    registered through ``subscribe_all`` are attached to every store,
    including the ones created later.
    """

    def __init__(
        self,
        remote_factory: RemoteFactory,
        key_value_store: KeyValueStore | None,
        reconciler: BootstrapReconciler,
    ):
        self._remote_factory = remote_factory
        self._kv = key_value_store
        self._reconciler = reconciler
        self._stores: dict[str, CollectionStore] = {}
        self._remotes: dict[str, RemoteCollectionClient] = {}
        self._listeners: dict[StateListener, list[Callable[[], None]]] = {}

    @property
    def reconciler(self) -> BootstrapReconciler:
        return self._reconciler

    def names(self) -> list[str]:
        return list(COLLECTIONS)

    def opened(self) -> list[CollectionStore]:
        """Stores that have been created so far."""
        return list(self._stores.values())

    def get(self, name: str) -> CollectionStore:
        """Return the store for ``name``, creating it if needed. No remote calls."""
        store = self._stores.get(name)
        if store is None:
            definition = get_collection_definition(name)
            remote = self._remote_factory(name)
            cache = SnapshotCache(name, self._kv) if self._kv is not None else None
            store = CollectionStore(definition, remote, cache)
            for listener, undos in self._listeners.items():
                undos.append(store.subscribe(listener))
            self._stores[name] = store
            self._remotes[name] = remote
            logger.debug("Created store for %s", name)
        return store

    async def open(self, name: str) -> CollectionStore:
        """Return the store for ``name`` after bootstrapping it once."""
        store = self.get(name)
        if not self._reconciler.has_run(name):
            await self._reconciler.reconcile(store)
        return store

    def subscribe_all(self, listener: StateListener) -> Callable[[], None]:
        self._listeners[listener] = [store.subscribe(listener) for store in self._stores.values()]

        def unsubscribe() -> None:
            for undo in self._listeners.pop(listener, []):
                undo()

        return unsubscribe

    async def close(self) -> None:
        """Release remote clients and drop every store."""
        for name, remote in self._remotes.items():
            try:
                await remote.aclose()
            except Exception:
                logger.exception("Error closing remote client for %s", name)
        self._remotes.clear()
        self._stores.clear()
        self._listeners.clear()
