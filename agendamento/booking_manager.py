import asyncio
import logging
from typing import Dict, Optional

from agendamento.models.agenda import AgendaConfig, SystemStatus
from agendamento.models.store_result import StoreResult
from agendamento.stores.fallback import FallbackStore
from agendamento.stores.local_cache import LocalCacheStore

logger = logging.getLogger(__name__)


def build_default_store() -> FallbackStore:
    """Firestore as primary, the JSON file cache as secondary."""
    from agendamento.stores.firestore_store import FirestoreStore

    remote = FirestoreStore()
    return FallbackStore(primary=remote, secondary=LocalCacheStore(), settings_store=remote)


class BookingManager:
    """Async facade over the fallback store, used by the wizard and the admin panel."""

    def __init__(self, store: Optional[FallbackStore] = None):
        self.store = store or build_default_store()

    async def _run_in_executor(self, func, *args):
        """Run synchronous store operations in executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    async def list_bookings(self) -> StoreResult:
        result = await self._run_in_executor(self.store.list_bookings)
        if result.degraded:
            logger.warning(f"Serving {len(result.value)} bookings from local cache")
        return result

    async def create_booking(self, data: Dict) -> StoreResult:
        result = await self._run_in_executor(self.store.create_booking, data)
        if result.ok:
            where = "local cache" if result.degraded else "remote store"
            logger.info(f"Booking created in {where}: {result.value.id} - {result.value.date} {result.value.time}")
        else:
            logger.error(f"Booking could not be stored: {result.error}")
        return result

    async def delete_booking(self, booking_id: str) -> StoreResult:
        result = await self._run_in_executor(self.store.delete_booking, booking_id)
        if result.ok:
            logger.info(f"Booking deleted: {booking_id}")
        return result

    async def delete_all_bookings(self) -> StoreResult:
        result = await self._run_in_executor(self.store.delete_all_bookings)
        logger.info(f"All bookings deleted ({result.value} remote records)")
        return result

    async def get_system_status(self) -> SystemStatus:
        return await self._run_in_executor(self.store.get_system_status)

    async def set_system_status(self, status: SystemStatus) -> StoreResult:
        result = await self._run_in_executor(self.store.set_system_status, status)
        if result.ok:
            logger.info(f"System status set to {result.value.value}")
        return result

    async def get_agenda_config(self) -> AgendaConfig:
        return await self._run_in_executor(self.store.get_agenda_config)

    async def save_agenda_config(self, config: AgendaConfig) -> StoreResult:
        return await self._run_in_executor(self.store.save_agenda_config, config)
