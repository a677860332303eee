import logging
from datetime import date
from typing import Dict, Union

from agendamento.booking_manager import BookingManager
from agendamento.errors import (
    BookingPersistenceError,
    BookingValidationError,
    DuplicateCPF,
    SchedulingClosed,
    WizardStepError,
)
from agendamento.models.agenda import SystemStatus
from agendamento.models.booking import Booking, utc_now_iso, validate_form
from agendamento.models.session import WizardSession, WizardStep
from agendamento.slot_booking import AvailabilityChecker

logger = logging.getLogger(__name__)


def _expect(session: WizardSession, step: WizardStep) -> None:
    if session.step != step:
        raise WizardStepError(step.value, session.step.value)


class BookingWizard:
    """
    Form -> calendar -> confirmation -> success.

    The slot check in `choose_slot` and the write in `confirm` are separate
    reads of the store, so two applicants can still end up on the same slot.
    """

    def __init__(self, booking_manager: BookingManager):
        self.booking_manager = booking_manager

    async def _ensure_open(self) -> None:
        if await self.booking_manager.get_system_status() == SystemStatus.OFF:
            raise SchedulingClosed()

    async def submit_form(self, session: WizardSession, data: Dict) -> WizardSession:
        _expect(session, WizardStep.FORM)
        await self._ensure_open()

        form = validate_form(data)

        result = await self.booking_manager.list_bookings()
        if any(b.cpf == form.cpf for b in result.value or []):
            logger.info(f"Rejected duplicate CPF ending in {form.cpf[-2:]}")
            raise DuplicateCPF(form.cpf)

        session.form = form
        session.step = WizardStep.CALENDAR
        return session

    async def load_calendar(self, session: WizardSession) -> AvailabilityChecker:
        _expect(session, WizardStep.CALENDAR)
        return await AvailabilityChecker(self.booking_manager).load()

    async def choose_slot(
        self, session: WizardSession, day: Union[date, str], time: str
    ) -> WizardSession:
        checker = await self.load_calendar(session)
        if not checker.is_offered(day, time):
            raise BookingValidationError("Horário fora da agenda disponível.")

        session.selected_slot = checker.select(day, time)
        session.step = WizardStep.CONFIRMATION
        return session

    def back_to_calendar(self, session: WizardSession) -> WizardSession:
        _expect(session, WizardStep.CONFIRMATION)
        session.selected_slot = None
        session.step = WizardStep.CALENDAR
        return session

    async def confirm(self, session: WizardSession) -> Booking:
        _expect(session, WizardStep.CONFIRMATION)
        await self._ensure_open()

        payload = {
            "name": session.form.name,
            "cpf": session.form.cpf,
            "phone": session.form.phone,
            "program": session.form.program,
            "date": session.selected_slot.date,
            "time": session.selected_slot.time,
            "createdAt": utc_now_iso(),
        }
        result = await self.booking_manager.create_booking(payload)
        if not result.ok:
            raise BookingPersistenceError(
                "Ocorreu um problema ao salvar seus dados. Tente novamente."
            ) from result.error

        session.last_booking = result.value
        session.stored_locally = result.degraded
        session.step = WizardStep.SUCCESS
        return result.value

    def new_booking(self, session: WizardSession) -> WizardSession:
        session.reset()
        return session
