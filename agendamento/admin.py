import asyncio
import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel

from agendamento.booking_manager import BookingManager
from agendamento.config.settings import admin_settings
from agendamento.errors import AccessDenied
from agendamento.excel import export_filename, export_to_excel
from agendamento.models.agenda import AgendaConfig, SystemStatus
from agendamento.models.booking import Booking, digits_only
from agendamento.models.store_result import StoreResult

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = ("program", "name", "cpf", "phone", "date", "time")


class BookingFilters(BaseModel):
    """Admin table filters. Empty values match everything."""
    program: str = ""
    date: str = ""
    time: str = ""
    name: str = ""
    cpf: str = ""
    phone: str = ""

    def matches(self, booking: Booking) -> bool:
        if self.program and self.program.lower().strip() not in (booking.program or "").lower():
            return False
        if self.date and booking.date != self.date:
            return False
        if self.time and booking.time != self.time:
            return False
        if self.name and self.name.lower().strip() not in (booking.name or "").lower():
            return False
        if self.cpf and digits_only(self.cpf) not in digits_only(booking.cpf):
            return False
        if self.phone and digits_only(self.phone) not in digits_only(booking.phone):
            return False
        return True


@dataclass
class SortState:
    key: str = ""
    direction: str = "asc"

    def toggle(self, key: str) -> "SortState":
        """Same column flips the direction, a new column starts ascending."""
        if key not in SORTABLE_FIELDS:
            raise ValueError(f"Cannot sort by '{key}'")
        if self.key == key:
            self.direction = "desc" if self.direction == "asc" else "asc"
        else:
            self.key, self.direction = key, "asc"
        return self


def filter_bookings(bookings: List[Booking], filters: Optional[BookingFilters]) -> List[Booking]:
    if filters is None:
        return list(bookings)
    return [b for b in bookings if filters.matches(b)]


def sort_bookings(bookings: List[Booking], sort: Optional[SortState]) -> List[Booking]:
    if sort is None or not sort.key:
        return list(bookings)
    return sorted(
        bookings,
        key=lambda b: str(getattr(b, sort.key, "") or "").lower(),
        reverse=sort.direction == "desc",
    )


def review_bookings(
    bookings: List[Booking],
    filters: Optional[BookingFilters] = None,
    sort: Optional[SortState] = None,
) -> List[Booking]:
    return sort_bookings(filter_bookings(bookings, filters), sort)


@dataclass
class AdminToken:
    token: str
    expires_at: datetime

    @property
    def expired(self) -> bool:
        return datetime.now(timezone.utc) >= self.expires_at


class AccessGate:
    """Static-password gate handing out short-lived admin tokens."""

    def __init__(self, password: Optional[str] = None, ttl_minutes: Optional[int] = None):
        self._password = password if password is not None else admin_settings.password
        self.ttl = timedelta(minutes=ttl_minutes if ttl_minutes is not None else admin_settings.token_ttl_minutes)
        self._tokens: Dict[str, AdminToken] = {}

    def password_matches(self, password: str) -> bool:
        if not self._password:
            return False
        return hmac.compare_digest((password or "").encode(), self._password.encode())

    def login(self, password: str) -> AdminToken:
        if not self.password_matches(password):
            logger.warning("Admin login rejected")
            raise AccessDenied()
        self._purge_expired()
        token = AdminToken(
            token=secrets.token_urlsafe(32),
            expires_at=datetime.now(timezone.utc) + self.ttl,
        )
        self._tokens[token.token] = token
        logger.info("Admin session opened")
        return token

    def check(self, token: Optional[str]) -> AdminToken:
        admin_token = self._tokens.get(token or "")
        if admin_token is None:
            raise AccessDenied("Acesso restrito aos administradores.")
        if admin_token.expired:
            self._tokens.pop(admin_token.token, None)
            raise AccessDenied("Sessão expirada. Entre novamente.")
        return admin_token

    def revoke(self, token: str) -> None:
        self._tokens.pop(token, None)

    def _purge_expired(self) -> None:
        for key in [k for k, t in self._tokens.items() if t.expired]:
            del self._tokens[key]


class AdminPanel:
    """Administrative operations, each gated by a valid token."""

    def __init__(self, booking_manager: BookingManager, gate: AccessGate):
        self.booking_manager = booking_manager
        self.gate = gate

    async def list_bookings(
        self,
        token: str,
        filters: Optional[BookingFilters] = None,
        sort: Optional[SortState] = None,
    ) -> List[Booking]:
        self.gate.check(token)
        result = await self.booking_manager.list_bookings()
        return review_bookings(result.value or [], filters, sort)

    async def delete(self, token: str, booking_id: str) -> StoreResult:
        self.gate.check(token)
        return await self.booking_manager.delete_booking(booking_id)

    async def delete_all(self, token: str, password: str) -> StoreResult:
        """Bulk delete, re-confirmed with the admin password. Store errors propagate."""
        self.gate.check(token)
        if not self.gate.password_matches(password):
            raise AccessDenied("Senha incorreta. A exclusão foi cancelada.")
        return await self.booking_manager.delete_all_bookings()

    async def get_status(self, token: str) -> SystemStatus:
        self.gate.check(token)
        return await self.booking_manager.get_system_status()

    async def toggle_status(self, token: str) -> StoreResult:
        self.gate.check(token)
        current = await self.booking_manager.get_system_status()
        return await self.booking_manager.set_system_status(current.toggled())

    async def get_config(self, token: str) -> AgendaConfig:
        self.gate.check(token)
        return await self.booking_manager.get_agenda_config()

    async def save_config(self, token: str, config: AgendaConfig) -> StoreResult:
        self.gate.check(token)
        return await self.booking_manager.save_agenda_config(config.check())

    async def export(
        self,
        token: str,
        filters: Optional[BookingFilters] = None,
        sort: Optional[SortState] = None,
    ) -> Tuple[str, bytes]:
        """Filename and workbook bytes for the filtered list. Nothing is written to disk."""
        bookings = await self.list_bookings(token, filters, sort)
        loop = asyncio.get_running_loop()
        content = await loop.run_in_executor(None, export_to_excel, bookings)
        return export_filename(), content
