"""Settings endpoints — manage runtime store behaviour."""

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from tripstore.application.services.settings_service import (
    RUNTIME_LABELS,
    get_runtime_settings,
    update_runtime_settings,
)
from tripstore.config import RUNTIME_KEYS

router = APIRouter(prefix="/settings", tags=["Settings"])


class RuntimeSettingsResponse(BaseModel):
    values: dict[str, bool]          # key → effective value
    labels: dict[str, str]           # key → human-friendly label


class RuntimeSettingsUpdate(BaseModel):
    values: dict[str, bool]


@router.get("/runtime", response_model=RuntimeSettingsResponse)
async def get_runtime():
    return RuntimeSettingsResponse(values=get_runtime_settings(), labels=RUNTIME_LABELS)


@router.put("/runtime", response_model=RuntimeSettingsResponse)
async def put_runtime(body: RuntimeSettingsUpdate):
    """Update runtime switches. Takes effect for collections opened afterwards."""
    unknown = set(body.values) - set(RUNTIME_KEYS)
    if unknown:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown settings: {', '.join(sorted(unknown))}",
        )
    return RuntimeSettingsResponse(values=update_runtime_settings(body.values), labels=RUNTIME_LABELS)
