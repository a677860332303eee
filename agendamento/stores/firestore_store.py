import logging
from typing import Dict, List, Optional

from agendamento.config.settings import agenda_settings, booking_settings
from agendamento.db import FirebaseManager
from agendamento.stores.base import BookingStore, SettingsStore

logger = logging.getLogger(__name__)


class FirestoreStore(BookingStore, SettingsStore):
    """Bookings collection and settings documents in Firestore."""

    def __init__(self, db=None):
        if db is None:
            db = FirebaseManager().get_firestore_client()
        self.db = db
        self.collection_name = booking_settings.collection_name
        self.settings_collection = agenda_settings.settings_collection

    def _collection(self):
        return self.db.collection(self.collection_name)

    def list_bookings(self) -> List[Dict]:
        query = self._collection().order_by("createdAt", direction="DESCENDING")
        return [{"id": doc.id, **(doc.to_dict() or {})} for doc in query.stream()]

    def add_booking(self, document: Dict) -> str:
        _, doc_ref = self._collection().add(document)
        logger.info(f"Booking stored in Firestore: {doc_ref.id}")
        return doc_ref.id

    def delete_booking(self, booking_id: str) -> None:
        self._collection().document(booking_id).delete()

    def delete_all_bookings(self) -> int:
        # One delete per document; an interruption leaves the rest in place.
        count = 0
        for doc in self._collection().stream():
            doc.reference.delete()
            count += 1
        logger.info(f"Deleted {count} bookings from Firestore")
        return count

    def get_document(self, name: str) -> Optional[Dict]:
        doc = self.db.collection(self.settings_collection).document(name).get()
        if not doc.exists:
            return None
        return doc.to_dict()

    def set_document(self, name: str, data: Dict) -> None:
        self.db.collection(self.settings_collection).document(name).set(data)
