from .base import Base
from .session import (
    async_session_factory,
    build_engine,
    build_session_factory,
    create_tables,
    engine,
)
from .models import CollectionRecordModel

__all__ = [
    "Base",
    "engine",
    "async_session_factory",
    "build_engine",
    "build_session_factory",
    "create_tables",
    "CollectionRecordModel",
]
