"""Pydantic DTOs for the collection store HTTP surface."""

from typing import Any

from pydantic import BaseModel, Field


class CollectionStateResponse(BaseModel):
    """Observable state of one collection."""

    collection: str
    records: list[dict[str, Any]]
    load_state: str
    is_loading: bool
    degraded: bool
    last_error: str | None
    bootstrap_phase: str
    blocked_by: str | None
    revision: int


class CollectionSummary(BaseModel):
    """Catalogue entry returned by the collection listing."""

    name: str
    label: str
    required_fields: list[str]
    active: bool
    record_count: int | None = None
    degraded: bool | None = None


class BulkTransferResponse(BaseModel):
    """Outcome of an import or reset."""

    operation: str
    collection: str
    phase: str
    succeeded: bool
    planned_removals: int
    planned_inserts: int
    removed: int
    inserted: int
    failed_phase: str | None = None
    failed_record_id: str | None = None
    error: str | None = None


class SaveAsDefaultRequest(BaseModel):
    """Collections whose current records become the new baseline sample."""

    collections: list[str] = Field(
        default_factory=lambda: ["destinations", "itinerary_items"],
        min_length=1,
        examples=[["destinations", "itinerary_items"]],
    )


class SaveAsDefaultResponse(BaseModel):
    operation: str
    succeeded: bool
    saved: dict[str, int]
    failed: list[str]
    saved_at: str


class SampleLoadStatusResponse(BaseModel):
    collection: str
    inserted: int
    failed: int
    error: str | None = None
    succeeded: bool
