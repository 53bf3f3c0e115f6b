from .json_file_store import JsonFileKeyValueStore
from .memory_store import InMemoryKeyValueStore

__all__ = [
    "JsonFileKeyValueStore",
    "InMemoryKeyValueStore",
]
