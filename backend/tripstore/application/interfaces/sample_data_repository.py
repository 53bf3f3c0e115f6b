"""Abstract source of built-in sample datasets."""

from abc import ABC, abstractmethod

from tripstore.domain.entities import Record


class SampleDataRepository(ABC):
    """Port for the built-in sample data shipped with the application."""

    @abstractmethod
    def load(self, collection: str) -> list[Record]:
        """Return a fresh copy of the sample dataset, in its fixed order.

        Collections without a sample dataset return an empty list.
        """
        ...
