from abc import ABC, abstractmethod
from collections.abc import Iterable

from app.dedup.models import DuplicateIndexEntry


class BaseDuplicateIndexStore(ABC):
    """Contract for duplicate index checkpoint backends."""

    @abstractmethod
    def load(self) -> list[DuplicateIndexEntry]:
        """Return every checkpointed entry.

        Raises:
            IndexStoreError: if the backend is unreachable or holds corrupt rows.
        """

    @abstractmethod
    def checkpoint(self, entries: Iterable[DuplicateIndexEntry]) -> None:
        """Persist *entries*; entries already stored are left untouched.

        Raises:
            IndexStoreError: if the backend cannot be written.
        """
