import json
import logging
import os
import threading
import time
from pathlib import Path
from typing import Dict, List, Optional

from agendamento.config.settings import booking_settings
from agendamento.stores.base import BookingStore

logger = logging.getLogger(__name__)


class LocalCacheStore(BookingStore):
    """
    Durable local mirror of the booking list.

    The file holds a single string-keyed entry whose value is the whole list,
    newest first. It is only shared with processes reading the same path.
    """

    def __init__(self, path: Optional[str] = None, key: Optional[str] = None):
        self.path = Path(path or booking_settings.cache_path)
        self.key = key or booking_settings.cache_key
        self._lock = threading.Lock()

    def _read(self) -> List[Dict]:
        if not self.path.exists():
            return []
        with self.path.open("r", encoding="utf-8") as f:
            raw = f.read()
        if not raw.strip():
            return []
        items = json.loads(raw).get(self.key) or []
        if not isinstance(items, list):
            raise ValueError(f"Cache entry '{self.key}' is not a list")
        return items

    def _write(self, items: List[Dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump({self.key: items}, f, ensure_ascii=False)
        os.replace(tmp, self.path)

    def _new_id(self, items: List[Dict]) -> str:
        # Millisecond timestamp, bumped until unique within the cache.
        taken = {str(item.get("id")) for item in items}
        candidate = int(time.time() * 1000)
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)

    def list_bookings(self) -> List[Dict]:
        with self._lock:
            return self._read()

    def replace_all(self, items: List[Dict]) -> None:
        """Overwrite the mirror with a fresh remote listing."""
        with self._lock:
            self._write(list(items))

    def add_booking(self, document: Dict) -> str:
        with self._lock:
            items = self._read()
            booking_id = document.get("id") or self._new_id(items)
            items = [item for item in items if item.get("id") != booking_id]
            items.insert(0, {**document, "id": booking_id})
            self._write(items)
            return booking_id

    def delete_booking(self, booking_id: str) -> None:
        with self._lock:
            items = self._read()
            self._write([item for item in items if item.get("id") != booking_id])

    def delete_all_bookings(self) -> int:
        with self._lock:
            try:
                count = len(self._read())
            except ValueError:
                count = 0
            self._write([])
            return count
