"""Domain entities for bulk transfer operations (import / reset / save-as-default)."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class TransferOperation(str, Enum):
    """Kinds of whole-collection operations."""

    IMPORT = "import"
    RESET = "reset"
    SAVE_AS_DEFAULT = "save_as_default"


class TransferPhase(str, Enum):
    """Two-phase replace state machine: draft → clearing → seeding → verified."""

    DRAFT = "draft"
    CLEARING = "clearing"
    SEEDING = "seeding"
    VERIFIED = "verified"


@dataclass
class BulkTransferResult:
    """Progress and outcome of one import or reset.

    ``phase`` is the furthest phase entered. When a call fails, ``failed_phase``
    names it and ``removed`` / ``inserted`` count the calls that completed
    before the failure; nothing after the failing call was attempted.
    """

    operation: TransferOperation
    collection: str
    phase: TransferPhase = TransferPhase.DRAFT
    planned_removals: int = 0
    planned_inserts: int = 0
    removed: int = 0
    inserted: int = 0
    failed_phase: TransferPhase | None = None
    failed_record_id: str | None = None
    error: str | None = None
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime | None = None

    @property
    def succeeded(self) -> bool:
        return self.phase == TransferPhase.VERIFIED and self.failed_phase is None

    def advance(self, phase: TransferPhase) -> None:
        """Enter the next phase."""
        self.phase = phase

    def mark_failed(self, error: Exception, record_id: str | None = None) -> None:
        """Record the failing phase and error; counters stay as they were."""
        self.failed_phase = self.phase
        self.failed_record_id = record_id
        self.error = str(error)
        self.finished_at = datetime.now(timezone.utc)

    def mark_verified(self) -> None:
        self.phase = TransferPhase.VERIFIED
        self.finished_at = datetime.now(timezone.utc)

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation.value,
            "collection": self.collection,
            "phase": self.phase.value,
            "succeeded": self.succeeded,
            "planned_removals": self.planned_removals,
            "planned_inserts": self.planned_inserts,
            "removed": self.removed,
            "inserted": self.inserted,
            "failed_phase": self.failed_phase.value if self.failed_phase else None,
            "failed_record_id": self.failed_record_id,
            "error": self.error,
        }


@dataclass
class SaveAsDefaultResult:
    """Outcome of snapshotting several collections as the new baseline."""

    saved: dict[str, int] = field(default_factory=dict)
    failed: list[str] = field(default_factory=list)
    saved_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def succeeded(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation": TransferOperation.SAVE_AS_DEFAULT.value,
            "succeeded": self.succeeded,
            "saved": dict(self.saved),
            "failed": list(self.failed),
            "saved_at": self.saved_at.isoformat(),
        }


@dataclass
class SampleLoadStatus:
    """Per-collection status line of a "load all sample data" run."""

    collection: str
    inserted: int = 0
    failed: int = 0
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.failed == 0 and self.error is None
