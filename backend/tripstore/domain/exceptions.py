"""Domain-specific exceptions — framework-independent."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tripstore.domain.entities.bulk_transfer import BulkTransferResult


class CollectionStoreError(Exception):
    """Base class for every error raised by the collection store layers."""


class RemoteUnavailableError(CollectionStoreError):
    """Raised when the remote table service cannot be reached at all.

    This is the only remote failure that triggers local-snapshot fallback.
    """

    def __init__(self, collection: str, reason: str):
        self.collection = collection
        self.reason = reason
        super().__init__(f"Remote table '{collection}' unavailable: {reason}")


class RemoteError(CollectionStoreError):
    """Raised when the remote service rejected a request (constraint, auth, ...)."""

    def __init__(self, collection: str, message: str, status_code: int | None = None):
        self.collection = collection
        self.message = message
        self.status_code = status_code
        prefix = f"[{status_code}] " if status_code is not None else ""
        super().__init__(f"{prefix}Remote table '{collection}' rejected request: {message}")


class RecordNotFoundError(CollectionStoreError):
    """Raised when an update targets an id that has no row on the remote side."""

    def __init__(self, collection: str, record_id: str):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"{collection} record with id '{record_id}' not found")


class InvalidFormatError(CollectionStoreError):
    """Raised when an import payload is malformed. No remote call has been made."""

    def __init__(self, collection: str, reason: str):
        self.collection = collection
        self.reason = reason
        super().__init__(f"Invalid {collection} import payload: {reason}")


class LocalPersistenceError(CollectionStoreError):
    """Raised by key-value adapters when a device-local read or write fails.

    The snapshot cache catches it; it never reaches a store caller.
    """

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Local storage failure for '{key}': {reason}")


class ConflictError(CollectionStoreError):
    """Raised when an update is based on a stale version of the record."""

    def __init__(
        self,
        collection: str,
        record_id: str,
        expected_version: str | None,
        current_version: str | None,
    ):
        self.collection = collection
        self.record_id = record_id
        self.expected_version = expected_version
        self.current_version = current_version
        super().__init__(
            f"{collection} record '{record_id}' changed: expected version "
            f"'{expected_version}', held version is '{current_version}'"
        )


class CollectionBlockedError(CollectionStoreError):
    """Raised when a mutation is attempted after a partially failed bulk transfer."""

    def __init__(self, collection: str, operation: str):
        self.collection = collection
        self.operation = operation
        super().__init__(
            f"Collection '{collection}' is blocked after a failed {operation}; "
            "refetch before making further changes"
        )


class BulkTransferError(CollectionStoreError):
    """Raised when an import or reset stops part-way through."""

    def __init__(self, result: BulkTransferResult):
        self.result = result
        super().__init__(
            f"{result.operation.value} of '{result.collection}' failed during "
            f"{result.failed_phase.value if result.failed_phase else 'unknown'} phase "
            f"(removed={result.removed}, inserted={result.inserted}): {result.error}"
        )


class UnknownCollectionError(CollectionStoreError):
    """Raised when a collection name is not registered in the catalogue."""

    def __init__(self, collection: str):
        self.collection = collection
        super().__init__(f"Unknown collection '{collection}'")
