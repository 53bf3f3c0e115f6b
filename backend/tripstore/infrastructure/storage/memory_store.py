"""Process-local key/value storage, used when nothing should touch the disk."""

from tripstore.application.interfaces import KeyValueStore
from tripstore.domain.exceptions import LocalPersistenceError


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed key/value store.

    ``writable = False`` makes ``set`` raise ``LocalPersistenceError``, the
    way a full or read-only disk would.
    """

    def __init__(self, namespace: str = "default"):
        self._namespace = namespace
        self._data: dict[str, str] = {}
        self.writable = True

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    def get(self, key: str) -> str | None:
        return self._data.get(self._key(key))

    def set(self, key: str, value: str) -> None:
        if not self.writable:
            raise LocalPersistenceError(key, "storage is read-only")
        self._data[self._key(key)] = value

    def delete(self, key: str) -> None:
        self._data.pop(self._key(key), None)
