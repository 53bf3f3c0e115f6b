"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from tripstore.presentation.api.v1.endpoints.health import router as health_router
from tripstore.presentation.api.v1.endpoints.collections import router as collections_router
from tripstore.presentation.api.v1.endpoints.settings import router as settings_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(collections_router)
router.include_router(settings_router)
