import asyncio

import pytest

from agendamento.booking_manager import BookingManager
from agendamento.errors import (
    BookingPersistenceError,
    BookingValidationError,
    DuplicateCPF,
    SchedulingClosed,
    SlotConflict,
    WizardStepError,
)
from agendamento.models.agenda import SystemStatus
from agendamento.models.session import WizardSession, WizardStep
from agendamento.stores.fallback import FallbackStore
from agendamento.wizard import BookingWizard
from tests.fakes import BrokenCache, UnreachableStore, booking_doc

FORM = {"name": "  Maria Souza ", "cpf": "987.654.321-00", "phone": "(21) 99876-5432", "program": "prouni"}


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def wizard(manager):
    return BookingWizard(manager)


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"name": "   "}, "Por favor, preencha o nome completo."),
        ({"cpf": "1234567890"}, "CPF deve conter 11 dígitos."),
        ({"phone": "99876543"}, "Telefone inválido. Insira DDD + número."),
        ({"program": ""}, "Por favor, selecione um programa (FIES ou PROUNI)."),
        ({"program": "ENEM"}, "Por favor, selecione um programa (FIES ou PROUNI)."),
    ],
)
def test_form_validation_messages(wizard, overrides, message):
    session = WizardSession()
    with pytest.raises(BookingValidationError) as exc:
        run(wizard.submit_form(session, {**FORM, **overrides}))
    assert str(exc.value) == message
    assert session.step is WizardStep.FORM


def test_form_reports_first_problem(wizard):
    with pytest.raises(BookingValidationError) as exc:
        run(wizard.submit_form(WizardSession(), {"cpf": "1"}))
    assert str(exc.value) == "Por favor, preencha o nome completo."


def test_form_normalizes_and_advances(wizard):
    session = run(wizard.submit_form(WizardSession(), FORM))

    assert session.step is WizardStep.CALENDAR
    assert session.form.name == "Maria Souza"
    assert session.form.cpf == "98765432100"
    assert session.form.phone == "21998765432"
    assert session.form.program == "PROUNI"


def test_duplicate_cpf_rejected_before_persistence(wizard, remote):
    remote.add_booking(booking_doc(cpf="98765432100"))

    with pytest.raises(DuplicateCPF):
        run(wizard.submit_form(WizardSession(), FORM))
    assert len(remote.records) == 1


def test_closed_system_rejects_new_bookings(wizard, remote):
    remote.set_document("status", {"status": SystemStatus.OFF.value})

    with pytest.raises(SchedulingClosed):
        run(wizard.submit_form(WizardSession(), FORM))


def test_full_flow_creates_booking(wizard, manager):
    session = run(wizard.submit_form(WizardSession(), FORM))
    run(wizard.choose_slot(session, "2026-02-02", "11:00"))

    assert session.step is WizardStep.CONFIRMATION
    assert "987.654.321-00" in session.get_summary()
    assert "02/02/2026" in session.get_summary()

    booking = run(wizard.confirm(session))

    assert session.step is WizardStep.SUCCESS
    assert not session.stored_locally
    assert booking.id
    assert booking.created_at
    assert booking.phone == "21998765432"

    listed = run(manager.list_bookings()).value
    assert [(b.id, b.date, b.time) for b in listed] == [(booking.id, "2026-02-02", "11:00")]


def test_taken_slot_is_refused(wizard, remote):
    remote.add_booking(booking_doc(cpf="11111111111", date="2026-02-02", time="11:00"))
    session = run(wizard.submit_form(WizardSession(), FORM))

    with pytest.raises(SlotConflict):
        run(wizard.choose_slot(session, "2026-02-02", "11:00"))
    assert session.step is WizardStep.CALENDAR


def test_slot_outside_agenda_is_refused(wizard):
    session = run(wizard.submit_form(WizardSession(), FORM))

    with pytest.raises(BookingValidationError):
        run(wizard.choose_slot(session, "2026-02-07", "11:00"))
    with pytest.raises(BookingValidationError):
        run(wizard.choose_slot(session, "2026-02-02", "18:30"))


def test_steps_must_follow_order(wizard):
    session = WizardSession()
    with pytest.raises(WizardStepError):
        run(wizard.confirm(session))
    with pytest.raises(WizardStepError):
        run(wizard.choose_slot(session, "2026-02-02", "11:00"))


def test_back_and_reset(wizard):
    session = run(wizard.submit_form(WizardSession(), FORM))
    run(wizard.choose_slot(session, "2026-02-02", "11:30"))

    wizard.back_to_calendar(session)
    assert session.step is WizardStep.CALENDAR
    assert session.selected_slot is None

    wizard.new_booking(session)
    assert session.step is WizardStep.FORM
    assert session.form is None


def test_offline_booking_is_stored_locally(offline_manager, cache):
    wizard = BookingWizard(offline_manager)
    session = run(wizard.submit_form(WizardSession(), FORM))
    run(wizard.choose_slot(session, "2026-02-03", "14:00"))

    booking = run(wizard.confirm(session))

    assert session.stored_locally
    assert cache.list_bookings()[0]["id"] == booking.id


def test_confirm_fails_when_nothing_accepts_the_write(tmp_path):
    manager = BookingManager(FallbackStore(UnreachableStore(), BrokenCache(path=str(tmp_path / "c.json"))))
    wizard = BookingWizard(manager)
    session = run(wizard.submit_form(WizardSession(), FORM))
    run(wizard.choose_slot(session, "2026-02-03", "14:00"))

    with pytest.raises(BookingPersistenceError):
        run(wizard.confirm(session))
    assert session.step is WizardStep.CONFIRMATION
