"""Collection store endpoints: state, CRUD, bulk transfer and live updates."""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from fastapi.responses import Response, StreamingResponse

from tripstore.application.collections import COLLECTIONS
from tripstore.application.schemas.collection import (
    BulkTransferResponse,
    CollectionStateResponse,
    CollectionSummary,
    SampleLoadStatusResponse,
    SaveAsDefaultRequest,
    SaveAsDefaultResponse,
)
from tripstore.application.services import (
    BulkTransferService,
    CollectionRegistry,
    CollectionStore,
    SampleDataLoader,
    SSEManager,
)
from tripstore.domain.exceptions import (
    BulkTransferError,
    CollectionBlockedError,
    CollectionStoreError,
    ConflictError,
    InvalidFormatError,
    RecordNotFoundError,
    RemoteError,
    RemoteUnavailableError,
    UnknownCollectionError,
)
from tripstore.infrastructure.dependencies import (
    get_bulk_transfer_service,
    get_registry,
    get_sample_data_loader,
    get_sse_manager,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/collections", tags=["Collections"])

_STATUS_BY_ERROR: tuple[tuple[type[CollectionStoreError], int], ...] = (
    (UnknownCollectionError, status.HTTP_404_NOT_FOUND),
    (RecordNotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidFormatError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (ConflictError, status.HTTP_409_CONFLICT),
    (CollectionBlockedError, status.HTTP_409_CONFLICT),
    (BulkTransferError, status.HTTP_409_CONFLICT),
    (RemoteUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (RemoteError, status.HTTP_502_BAD_GATEWAY),
)


def _to_http_error(exc: CollectionStoreError) -> HTTPException:
    """Translate a domain error into the matching HTTP error."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            break
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    detail: Any = str(exc)
    if isinstance(exc, BulkTransferError):
        detail = {"message": str(exc), "result": exc.result.to_dict()}
    return HTTPException(status_code=status_code, detail=detail)


async def _open(registry: CollectionRegistry, name: str) -> CollectionStore:
    try:
        return await registry.open(name)
    except CollectionStoreError as e:
        raise _to_http_error(e)


def _state(store: CollectionStore) -> CollectionStateResponse:
    return CollectionStateResponse(**store.state.to_dict())


# ── Catalogue & cross-collection operations ──────────────────────────

@router.get("", response_model=list[CollectionSummary])
async def list_collections(
    registry: CollectionRegistry = Depends(get_registry),
) -> list[CollectionSummary]:
    """List every known collection; opened ones include their record count."""
    opened = {store.name: store for store in registry.opened()}
    summaries = []
    for name, definition in COLLECTIONS.items():
        store = opened.get(name)
        summaries.append(
            CollectionSummary(
                name=name,
                label=definition.label,
                required_fields=list(definition.required_fields),
                active=store is not None,
                record_count=len(store.records) if store else None,
                degraded=store.degraded if store else None,
            )
        )
    return summaries


@router.get("/stream")
async def collection_state_stream(
    sse: SSEManager = Depends(get_sse_manager),
) -> StreamingResponse:
    """SSE endpoint streaming a 'collection_state' event on every store change."""
    return StreamingResponse(
        sse.subscribe(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.post("/save-as-default", response_model=SaveAsDefaultResponse)
async def save_as_default(
    body: SaveAsDefaultRequest,
    registry: CollectionRegistry = Depends(get_registry),
    service: BulkTransferService = Depends(get_bulk_transfer_service),
) -> SaveAsDefaultResponse:
    """Store the current records of the given collections as their seed baseline."""
    stores = [await _open(registry, name) for name in body.collections]
    result = service.save_as_default(stores)
    return SaveAsDefaultResponse(**result.to_dict())


@router.post("/load-samples", response_model=list[SampleLoadStatusResponse])
async def load_all_samples(
    loader: SampleDataLoader = Depends(get_sample_data_loader),
) -> list[SampleLoadStatusResponse]:
    """Insert every built-in sample dataset; failed records are counted, not fatal."""
    try:
        statuses = await loader.load_all()
    except CollectionStoreError as e:
        raise _to_http_error(e)
    return [
        SampleLoadStatusResponse(
            collection=s.collection,
            inserted=s.inserted,
            failed=s.failed,
            error=s.error,
            succeeded=s.succeeded,
        )
        for s in statuses
    ]


# ── Single collection ────────────────────────────────────────────────

@router.get("/{name}", response_model=CollectionStateResponse)
async def get_collection(
    name: str,
    registry: CollectionRegistry = Depends(get_registry),
) -> CollectionStateResponse:
    """Return the collection state; the first call bootstraps the collection."""
    return _state(await _open(registry, name))


@router.post("/{name}/refetch", response_model=CollectionStateResponse)
async def refetch_collection(
    name: str,
    registry: CollectionRegistry = Depends(get_registry),
) -> CollectionStateResponse:
    store = await _open(registry, name)
    try:
        await store.refetch()
    except CollectionStoreError as e:
        raise _to_http_error(e)
    return _state(store)


@router.post("/{name}/records", status_code=status.HTTP_201_CREATED)
async def create_record(
    name: str,
    data: dict[str, Any] = Body(...),
    registry: CollectionRegistry = Depends(get_registry),
) -> dict[str, Any]:
    """Create a record; blank fields are left to the remote defaults."""
    store = await _open(registry, name)
    try:
        return await store.insert(data)
    except CollectionStoreError as e:
        raise _to_http_error(e)


@router.put("/{name}/records/{record_id}")
async def update_record(
    name: str,
    record_id: str,
    data: dict[str, Any] = Body(...),
    expected_version: str | None = Query(
        None, description="updated_at of the record the change is based on"
    ),
    registry: CollectionRegistry = Depends(get_registry),
) -> dict[str, Any]:
    """Update a record; blank fields are cleared."""
    store = await _open(registry, name)
    try:
        return await store.update(record_id, data, expected_version=expected_version)
    except CollectionStoreError as e:
        raise _to_http_error(e)


@router.delete("/{name}/records/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_record(
    name: str,
    record_id: str,
    registry: CollectionRegistry = Depends(get_registry),
) -> None:
    store = await _open(registry, name)
    try:
        await store.remove(record_id)
    except CollectionStoreError as e:
        raise _to_http_error(e)


@router.post("/{name}/import", response_model=BulkTransferResponse)
async def import_collection(
    name: str,
    payload: Any = Body(..., description="JSON array of records"),
    registry: CollectionRegistry = Depends(get_registry),
    service: BulkTransferService = Depends(get_bulk_transfer_service),
) -> BulkTransferResponse:
    """Replace every record of the collection with the posted array."""
    store = await _open(registry, name)
    try:
        result = await service.import_records(store, payload)
    except CollectionStoreError as e:
        raise _to_http_error(e)
    return BulkTransferResponse(**result.to_dict())


@router.post("/{name}/reset", response_model=BulkTransferResponse)
async def reset_collection(
    name: str,
    registry: CollectionRegistry = Depends(get_registry),
    service: BulkTransferService = Depends(get_bulk_transfer_service),
) -> BulkTransferResponse:
    """Replace every record of the collection with the built-in sample data."""
    store = await _open(registry, name)
    try:
        result = await service.reset(store)
    except CollectionStoreError as e:
        raise _to_http_error(e)
    return BulkTransferResponse(**result.to_dict())


@router.get("/{name}/export")
async def export_collection(
    name: str,
    registry: CollectionRegistry = Depends(get_registry),
    service: BulkTransferService = Depends(get_bulk_transfer_service),
) -> Response:
    """Download the records currently held in memory as pretty-printed JSON."""
    store = await _open(registry, name)
    return Response(
        content=service.export_records(store),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{name}.json"'},
    )


@router.delete("/{name}/custom-default", status_code=status.HTTP_204_NO_CONTENT)
async def clear_custom_default(
    name: str,
    registry: CollectionRegistry = Depends(get_registry),
) -> None:
    """Forget the saved baseline; the built-in sample is used for seeding again."""
    try:
        store = registry.get(name)
    except CollectionStoreError as e:
        raise _to_http_error(e)
    cache = store.snapshot_cache
    if cache is None or not cache.clear_custom_default():
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Could not clear the custom default of '{name}'",
        )
