"""Adapters for the remote table service."""

from .memory_collection_client import InMemoryCollectionClient
from .postgrest_collection_client import PostgrestCollectionClient
from .sqlalchemy_collection_client import SQLAlchemyCollectionClient

__all__ = [
    "InMemoryCollectionClient",
    "PostgrestCollectionClient",
    "SQLAlchemyCollectionClient",
]
