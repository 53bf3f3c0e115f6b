from .collection import (
    BulkTransferResponse,
    CollectionStateResponse,
    CollectionSummary,
    SampleLoadStatusResponse,
    SaveAsDefaultRequest,
    SaveAsDefaultResponse,
)
from .itinerary import (
    DETAILS_BY_TYPE,
    TypeSpecificData,
    normalize_itinerary_payload,
    parse_type_specific_data,
)

__all__ = [
    "BulkTransferResponse",
    "CollectionStateResponse",
    "CollectionSummary",
    "SampleLoadStatusResponse",
    "SaveAsDefaultRequest",
    "SaveAsDefaultResponse",
    "DETAILS_BY_TYPE",
    "TypeSpecificData",
    "normalize_itinerary_payload",
    "parse_type_specific_data",
]
