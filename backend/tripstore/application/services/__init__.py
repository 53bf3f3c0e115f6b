from .snapshot_cache import SnapshotCache
from .collection_store import CollectionStore
from .bootstrap_reconciler import BootstrapOutcome, BootstrapReconciler
from .bulk_transfer import BulkTransferService
from .collection_registry import CollectionRegistry
from .sample_data_loader import SampleDataLoader
from .sse_manager import SSEManager

__all__ = [
    "SnapshotCache",
    "CollectionStore",
    "BootstrapOutcome",
    "BootstrapReconciler",
    "BulkTransferService",
    "CollectionRegistry",
    "SampleDataLoader",
    "SSEManager",
]
