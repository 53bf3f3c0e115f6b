from .record import Record, UNSET, SERVER_OWNED_FIELDS, new_record_id, record_version
from .collection import CollectionDefinition
from .collection_state import BootstrapPhase, CollectionState, LoadState
from .bulk_transfer import (
    BulkTransferResult,
    SampleLoadStatus,
    SaveAsDefaultResult,
    TransferOperation,
    TransferPhase,
)
from .itinerary import ItineraryItemType

__all__ = [
    "Record",
    "UNSET",
    "SERVER_OWNED_FIELDS",
    "new_record_id",
    "record_version",
    "CollectionDefinition",
    "BootstrapPhase",
    "CollectionState",
    "LoadState",
    "BulkTransferResult",
    "SampleLoadStatus",
    "SaveAsDefaultResult",
    "TransferOperation",
    "TransferPhase",
    "ItineraryItemType",
]
