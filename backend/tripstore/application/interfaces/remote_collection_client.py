"""Abstract remote table interface (port) for one named collection."""

from abc import ABC, abstractmethod

from tripstore.domain.entities import Record


class RemoteCollectionClient(ABC):
    """Port for the remote table service — implemented in the infrastructure layer.

    Each method maps to exactly one remote call. Implementations translate
    transport failures into ``RemoteUnavailableError`` and service rejections
    into ``RemoteError``; they never sanitize payloads or fall back locally.
    """

    def __init__(self, collection: str):
        self._collection = collection

    @property
    def collection(self) -> str:
        return self._collection

    @abstractmethod
    async def list_records(self) -> list[Record]:
        """Return every row of the table, newest first."""
        ...

    @abstractmethod
    async def insert(self, record: Record) -> Record:
        """Create one row and return it as stored (with server timestamps)."""
        ...

    @abstractmethod
    async def update(self, record_id: str, changes: Record) -> Record:
        """Apply ``changes`` to the row with ``record_id``.

        Raises ``RecordNotFoundError`` when no row matched.
        """
        ...

    @abstractmethod
    async def remove(self, record_id: str) -> None:
        """Delete the row with ``record_id``. Absent rows are not an error."""
        ...

    async def aclose(self) -> None:
        """Release transport resources. Clients without any keep this no-op."""
        return None
