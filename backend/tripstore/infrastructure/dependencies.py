"""FastAPI dependency injection — wires infrastructure to application layer."""

import logging
from functools import lru_cache

import httpx
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tripstore.config import Settings, get_settings
from tripstore.application.interfaces import KeyValueStore
from tripstore.application.services import (
    BootstrapReconciler,
    BulkTransferService,
    CollectionRegistry,
    SampleDataLoader,
    SSEManager,
)
from tripstore.application.services.collection_registry import RemoteFactory
from tripstore.infrastructure.remote import (
    InMemoryCollectionClient,
    PostgrestCollectionClient,
    SQLAlchemyCollectionClient,
)
from tripstore.infrastructure.sample_data.yaml_sample_repository import YamlSampleDataRepository
from tripstore.infrastructure.storage import JsonFileKeyValueStore

logger = logging.getLogger(__name__)

REMOTE_BACKENDS = ("database", "postgrest", "memory")


@lru_cache
def get_sse_manager() -> SSEManager:
    """Process-wide SSE broadcaster."""
    return SSEManager()


@lru_cache
def get_sample_repository() -> YamlSampleDataRepository:
    return YamlSampleDataRepository()


def build_remote_factory(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> RemoteFactory:
    """Return a callable that creates the configured remote client for a collection."""
    backend = settings.remote_backend.lower()

    if backend == "database":
        if session_factory is None:
            raise ValueError("remote_backend 'database' needs a session factory")
        return lambda name: SQLAlchemyCollectionClient(name, session_factory)

    if backend == "postgrest":
        if not settings.postgrest_url.strip():
            raise ValueError("remote_backend 'postgrest' needs POSTGREST_URL")
        return lambda name: PostgrestCollectionClient(
            name,
            base_url=settings.postgrest_url,
            api_key=settings.postgrest_api_key or None,
            timeout=settings.remote_timeout,
            http_client=http_client,
        )

    if backend == "memory":
        logger.warning("Using the in-memory remote backend; data is lost on restart")
        return InMemoryCollectionClient

    raise ValueError(f"Unknown remote_backend '{settings.remote_backend}' (expected one of {REMOTE_BACKENDS})")


def build_registry(
    settings: Settings,
    remote_factory: RemoteFactory,
    key_value_store: KeyValueStore | None = None,
) -> CollectionRegistry:
    """Assemble the collection registry from settings."""
    if key_value_store is None:
        key_value_store = JsonFileKeyValueStore(settings.snapshot_dir, settings.snapshot_namespace)
    # seeding follows the runtime switch at the time each collection is opened
    reconciler = BootstrapReconciler(samples=get_sample_repository())
    registry = CollectionRegistry(remote_factory, key_value_store, reconciler)
    registry.subscribe_all(get_sse_manager().publish_state)
    return registry


def get_registry(request: Request) -> CollectionRegistry:
    """Provides the registry created by the application lifespan."""
    return request.app.state.registry


def get_bulk_transfer_service() -> BulkTransferService:
    settings = get_settings()
    return BulkTransferService(
        samples=get_sample_repository(),
        concurrent_reset=settings.reset_concurrent_phases,
    )


def get_sample_data_loader(request: Request) -> SampleDataLoader:
    return SampleDataLoader(get_registry(request), get_sample_repository())
