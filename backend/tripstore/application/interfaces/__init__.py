from .remote_collection_client import RemoteCollectionClient
from .key_value_store import KeyValueStore
from .sample_data_repository import SampleDataRepository

__all__ = [
    "RemoteCollectionClient",
    "KeyValueStore",
    "SampleDataRepository",
]
