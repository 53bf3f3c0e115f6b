from .collection_record import CollectionRecordModel

__all__ = [
    "CollectionRecordModel",
]
