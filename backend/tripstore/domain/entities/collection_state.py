"""Domain entities describing the observable state of one collection."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .record import Record


class LoadState(str, Enum):
    """Loading lifecycle of a collection store."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"


class BootstrapPhase(str, Enum):
    """Once-per-session bootstrap lifecycle of a collection."""

    UNINITIALIZED = "uninitialized"
    PROBING = "probing"
    SEEDED = "seeded"
    POPULATED = "populated"
    DEGRADED_LOCAL = "degraded_local"


@dataclass(frozen=True)
class CollectionState:
    """Immutable view of a collection handed to subscribers.

    ``degraded`` is set whenever the remote table was unreachable and the
    records come from the local snapshot or the built-in sample instead.
    ``blocked_by`` names the bulk operation that failed part-way, if any.
    """

    collection: str
    records: tuple[Record, ...] = ()
    load_state: LoadState = LoadState.IDLE
    degraded: bool = False
    last_error: str | None = None
    bootstrap_phase: BootstrapPhase = BootstrapPhase.UNINITIALIZED
    blocked_by: str | None = None
    revision: int = field(default=0, compare=False)

    @property
    def is_loading(self) -> bool:
        return self.load_state == LoadState.LOADING

    @property
    def is_ready(self) -> bool:
        return self.load_state == LoadState.READY

    def to_dict(self) -> dict[str, Any]:
        return {
            "collection": self.collection,
            "records": [dict(r) for r in self.records],
            "load_state": self.load_state.value,
            "is_loading": self.is_loading,
            "degraded": self.degraded,
            "last_error": self.last_error,
            "bootstrap_phase": self.bootstrap_phase.value,
            "blocked_by": self.blocked_by,
            "revision": self.revision,
        }
