from enum import Enum
from typing import Optional
from pydantic import BaseModel

from agendamento.formatting import format_cpf, format_date_br
from agendamento.models.booking import Booking, BookingCreate, SlotSelection


class WizardStep(str, Enum):
    FORM = "form"
    CALENDAR = "calendar"
    CONFIRMATION = "confirmation"
    SUCCESS = "success"


class WizardSession(BaseModel):
    """State of one applicant going through the booking wizard"""
    step: WizardStep = WizardStep.FORM
    form: Optional[BookingCreate] = None
    selected_slot: Optional[SlotSelection] = None
    last_booking: Optional[Booking] = None
    stored_locally: bool = False

    def is_complete(self) -> bool:
        """Check if form data and a slot are present"""
        return self.form is not None and self.selected_slot is not None

    def get_summary(self) -> str:
        if not self.is_complete():
            return "Incomplete booking information"

        return (
            f"Nome: {self.form.name}\n"
            f"CPF: {format_cpf(self.form.cpf)}\n"
            f"Programa: {self.form.program}\n"
            f"Data: {format_date_br(self.selected_slot.date)}\n"
            f"Horário: {self.selected_slot.time}"
        )

    def reset(self) -> None:
        self.step = WizardStep.FORM
        self.form = None
        self.selected_slot = None
        self.last_booking = None
        self.stored_locally = False
