"""Domain entity describing one named, mirrored collection."""

from collections.abc import Callable
from dataclasses import dataclass

from .record import Record


@dataclass(frozen=True)
class CollectionDefinition:
    """Static description of a collection known to the store.

    ``required_fields`` are the discriminant fields an import payload must
    carry besides ``id``. ``unsupported_columns`` are stripped from outgoing
    payloads because the remote table does not have them (yet).
    ``normalize`` optionally reshapes a payload before sanitizing.
    """

    name: str
    label: str
    required_fields: tuple[str, ...]
    unsupported_columns: tuple[str, ...] = ()
    normalize: Callable[[Record], Record] | None = None

    def prepare(self, payload: Record) -> Record:
        """Apply the collection-specific normalizer, if any."""
        if self.normalize is None:
            return payload
        return self.normalize(payload)
