from abc import ABC, abstractmethod

from app.records.models import Record


class BaseRecordStore(ABC):
    """Contract for all record storage adapters."""

    @abstractmethod
    def get_all(self) -> list[Record]:
        """Return every stored record."""

    @abstractmethod
    def save_all(self, records: list[Record]) -> None:
        """Replace the stored collection with ``records``.

        Raises:
            StorageError: if the collection cannot be written.
        """

    @abstractmethod
    def clear(self) -> None:
        """Remove every stored record."""
