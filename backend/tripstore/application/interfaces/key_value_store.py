"""Abstract device-local key/value interface (port)."""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """Namespaced string key/value storage, synchronous from the caller's view.

    Implementations raise ``LocalPersistenceError`` on any storage failure.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored string or None when the key is absent."""
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key; absent keys are ignored."""
        ...
