from abc import ABC, abstractmethod
from typing import Dict, List, Optional


class BookingStore(ABC):
    """Synchronous booking persistence backend.

    Records are plain dicts carrying an `id` plus the document fields.
    Implementations raise on failure; callers decide how to recover.
    """

    @abstractmethod
    def list_bookings(self) -> List[Dict]:
        """All records, newest `createdAt` first."""

    @abstractmethod
    def add_booking(self, document: Dict) -> str:
        """Store a document and return its id."""

    @abstractmethod
    def delete_booking(self, booking_id: str) -> None:
        ...

    @abstractmethod
    def delete_all_bookings(self) -> int:
        """Remove every record, returning how many were removed."""


class SettingsStore(ABC):
    """Singleton settings documents, read and written by full replace."""

    @abstractmethod
    def get_document(self, name: str) -> Optional[Dict]:
        ...

    @abstractmethod
    def set_document(self, name: str, data: Dict) -> None:
        ...
