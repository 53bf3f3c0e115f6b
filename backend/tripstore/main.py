"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from pathlib import Path

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import make_url

from tripstore.config import get_settings
from tripstore.infrastructure.database import async_session_factory, create_tables, engine
from tripstore.infrastructure.dependencies import build_registry, build_remote_factory, get_sse_manager
from tripstore.infrastructure.logging.log_config import setup_logging
from tripstore.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


async def _ensure_database_exists() -> None:
    """Create the PostgreSQL database if it does not yet exist.

    Connects to the default ``postgres`` maintenance database, checks for the
    target database name, and issues ``CREATE DATABASE`` when missing.
    """
    import asyncpg

    settings = get_settings()
    db_name = make_url(settings.database_url).database
    if not db_name:
        return

    maintenance_url = settings.database_url.rsplit("/", 1)[0] + "/postgres"

    try:
        conn = await asyncpg.connect(maintenance_url)
        try:
            exists = await conn.fetchval(
                "SELECT 1 FROM pg_database WHERE datname = $1", db_name
            )
            if not exists:
                # CREATE DATABASE cannot run inside a transaction block
                await conn.execute(f'CREATE DATABASE "{db_name}"')
                logger.info("Created database '%s'", db_name)
            else:
                logger.debug("Database '%s' already exists", db_name)
        finally:
            await conn.close()
    except (OSError, asyncpg.PostgresError) as exc:
        logger.warning("Could not auto-create database '%s': %s", db_name, exc)


async def _prepare_database() -> None:
    """Make sure the database and the collection_records table exist."""
    settings = get_settings()
    url = make_url(settings.database_url)

    if url.get_backend_name() == "postgresql":
        await _ensure_database_exists()
    elif url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    await create_tables(engine)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — prepare storage, build the registry, tear down on exit."""
    settings = get_settings()
    setup_logging()

    # 1. Remote tables
    http_client: httpx.AsyncClient | None = None
    if settings.remote_backend == "database":
        await _prepare_database()
    elif settings.remote_backend == "postgrest":
        http_client = httpx.AsyncClient(timeout=settings.remote_timeout)

    # 2. Local snapshot directory
    Path(settings.snapshot_dir).mkdir(parents=True, exist_ok=True)

    # 3. Collection registry (stores are created lazily per request)
    remote_factory = build_remote_factory(
        settings,
        session_factory=async_session_factory,
        http_client=http_client,
    )
    app.state.registry = build_registry(settings, remote_factory)
    logger.info("Collection store ready (remote backend: %s)", settings.remote_backend)

    yield

    # Shutdown
    await app.state.registry.close()
    if http_client is not None:
        await http_client.aclose()
    await get_sse_manager().shutdown()
    await engine.dispose()


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tripstore.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
