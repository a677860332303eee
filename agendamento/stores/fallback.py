import logging
from typing import Dict, List, Optional

from pydantic import ValidationError

from agendamento.config.settings import agenda_settings
from agendamento.models.agenda import DEFAULT_AGENDA, AgendaConfig, SystemStatus
from agendamento.models.booking import Booking, utc_now_iso
from agendamento.models.store_result import StoreResult
from agendamento.stores.base import BookingStore, SettingsStore
from agendamento.stores.local_cache import LocalCacheStore

logger = logging.getLogger(__name__)


def _parse_bookings(records: List[Dict]) -> List[Booking]:
    bookings = []
    for record in records:
        try:
            bookings.append(Booking.model_validate(record))
        except ValidationError as e:
            logger.error(f"Error parsing booking {record.get('id')}: {e}")
    return bookings


class FallbackStore:
    """
    Remote-first booking persistence with a local cache fallback.

    Every booking call tries `primary` first. A remote failure is logged as a
    warning and served from `secondary` instead, tagged DEGRADED. Successful
    remote writes are mirrored into the cache on a best-effort basis; cache
    errors during mirroring are logged and dropped.

    Bookings written while degraded live only in the local cache and are never
    pushed to the remote store.
    """

    def __init__(
        self,
        primary: BookingStore,
        secondary: LocalCacheStore,
        settings_store: Optional[SettingsStore] = None,
    ):
        self.primary = primary
        self.secondary = secondary
        self.settings_store = settings_store
        if self.settings_store is None and isinstance(primary, SettingsStore):
            self.settings_store = primary

    def _mirror(self, action: str, func, *args) -> None:
        try:
            func(*args)
        except Exception as e:
            logger.error(f"Local cache {action} failed: {e}")

    # Bookings

    def list_bookings(self) -> StoreResult:
        try:
            records = self.primary.list_bookings()
        except Exception as e:
            logger.warning(f"Remote read failed, falling back to local cache: {e}")
            try:
                records = self.secondary.list_bookings()
            except Exception as cache_error:
                logger.error(f"Local cache read failed: {cache_error}")
                return StoreResult.fell_back([], e)
            bookings = sorted(_parse_bookings(records), key=lambda b: b.created_at or "", reverse=True)
            return StoreResult.fell_back(bookings, e)

        self._mirror("refresh", self.secondary.replace_all, records)
        return StoreResult.success(_parse_bookings(records))

    def create_booking(self, data: Dict) -> StoreResult:
        document = {k: v for k, v in data.items() if k != "id"}
        if not document.get("createdAt"):
            document["createdAt"] = utc_now_iso()

        try:
            booking_id = self.primary.add_booking(document)
        except Exception as e:
            logger.warning(f"Remote write failed, saving to local cache: {e}")
            try:
                booking_id = self.secondary.add_booking(document)
            except Exception as cache_error:
                logger.error(f"Failed to save to local cache: {cache_error}")
                return StoreResult.failed(cache_error)
            return StoreResult.fell_back(Booking.model_validate({**document, "id": booking_id}), e)

        self._mirror("insert", self.secondary.add_booking, {**document, "id": booking_id})
        return StoreResult.success(Booking.model_validate({**document, "id": booking_id}))

    def delete_booking(self, booking_id: str) -> StoreResult:
        try:
            self.primary.delete_booking(booking_id)
        except Exception as e:
            logger.warning(f"Remote delete failed, trying local cache: {e}")
            try:
                self.secondary.delete_booking(booking_id)
            except Exception as cache_error:
                logger.error(f"Failed to delete locally: {cache_error}")
                return StoreResult.failed(cache_error)
            return StoreResult.fell_back(True, e)

        self._mirror("delete", self.secondary.delete_booking, booking_id)
        return StoreResult.success(True)

    def delete_all_bookings(self) -> StoreResult:
        """Wipe remote and local bookings. A remote failure is raised, after the cache is cleared."""
        remote_error = None
        count = 0
        try:
            count = self.primary.delete_all_bookings()
        except Exception as e:
            remote_error = e

        self._mirror("clear", self.secondary.delete_all_bookings)

        if remote_error is not None:
            logger.error(f"Remote bulk delete failed: {remote_error}")
            raise remote_error
        return StoreResult.success(count)

    # Settings documents

    def get_system_status(self) -> SystemStatus:
        try:
            data = self.settings_store.get_document(agenda_settings.status_document) or {}
            return SystemStatus(data.get("status", SystemStatus.ON.value))
        except Exception as e:
            logger.warning(f"Failed to read system status, assuming ON: {e}")
            return SystemStatus.ON

    def set_system_status(self, status: SystemStatus) -> StoreResult:
        try:
            self.settings_store.set_document(
                agenda_settings.status_document, {"status": SystemStatus(status).value}
            )
        except Exception as e:
            logger.error(f"Failed to save system status: {e}")
            return StoreResult.failed(e)
        return StoreResult.success(SystemStatus(status))

    def get_agenda_config(self) -> AgendaConfig:
        try:
            data = self.settings_store.get_document(agenda_settings.config_document)
        except Exception as e:
            logger.warning(f"Failed to read agenda config, using defaults: {e}")
            return DEFAULT_AGENDA.model_copy(deep=True)

        if not data:
            logger.warning("No agenda config stored, using defaults")
            return DEFAULT_AGENDA.model_copy(deep=True)

        try:
            return AgendaConfig.from_document(data)
        except ValidationError as e:
            logger.error(f"Stored agenda config is invalid, using defaults: {e}")
            return DEFAULT_AGENDA.model_copy(deep=True)

    def save_agenda_config(self, config: AgendaConfig) -> StoreResult:
        try:
            self.settings_store.set_document(agenda_settings.config_document, config.to_document())
        except Exception as e:
            logger.error(f"Failed to save agenda config: {e}")
            return StoreResult.failed(e)
        logger.info("Agenda config saved")
        return StoreResult.success(config)
