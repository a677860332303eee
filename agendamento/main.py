import logging
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Header, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from agendamento.admin import SORTABLE_FIELDS, AccessGate, AdminPanel, BookingFilters, SortState
from agendamento.booking_manager import BookingManager
from agendamento.errors import (
    AccessDenied,
    AgendaConfigError,
    BookingPersistenceError,
    BookingValidationError,
    SchedulingClosed,
    SlotConflict,
)
from agendamento.models.agenda import AgendaConfig
from agendamento.models.session import WizardSession
from agendamento.slot_booking import AvailabilityChecker
from agendamento.wizard import BookingWizard

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Agendamento Processo Seletivo")

_booking_manager: Optional[BookingManager] = None
_gate: Optional[AccessGate] = None


def get_booking_manager() -> BookingManager:
    global _booking_manager
    if _booking_manager is None:
        _booking_manager = BookingManager()
    return _booking_manager


def get_gate() -> AccessGate:
    global _gate
    if _gate is None:
        _gate = AccessGate()
    return _gate


def get_admin_panel(
    manager: BookingManager = Depends(get_booking_manager),
    gate: AccessGate = Depends(get_gate),
) -> AdminPanel:
    return AdminPanel(manager, gate)


class BookingRequest(BaseModel):
    name: Optional[str] = None
    cpf: Optional[str] = None
    phone: Optional[str] = None
    program: Optional[str] = None
    date: str
    time: str


class LoginRequest(BaseModel):
    password: str


class DeleteAllRequest(BaseModel):
    password: str


@app.get("/api/agenda")
async def get_agenda(manager: BookingManager = Depends(get_booking_manager)):
    """Offerable dates and the time grid for the booking calendar."""
    checker = await AvailabilityChecker(manager).load()
    return {
        "status": "success",
        "dates": [d.isoformat() for d in checker.available_dates()],
        "times": checker.time_slots(),
    }


@app.get("/api/slots")
async def get_slots(date: str, manager: BookingManager = Depends(get_booking_manager)):
    checker = await AvailabilityChecker(manager).load()
    try:
        schedule = checker.slots_for_date(date)
    except ValueError:
        raise HTTPException(status_code=400, detail="Data inválida")
    if not checker.offers_date(date):
        raise HTTPException(status_code=404, detail="Data fora da agenda disponível")
    return {
        "status": "success",
        "date": schedule.iso_date,
        "slots": [{"time": s.time, "booked": s.booked} for s in schedule.slots],
    }


@app.post("/api/bookings", status_code=201)
async def create_booking(payload: BookingRequest, manager: BookingManager = Depends(get_booking_manager)):
    """Run the whole wizard for one applicant: form, slot, confirmation."""
    wizard = BookingWizard(manager)
    session = WizardSession()
    try:
        await wizard.submit_form(session, payload.model_dump(include={"name", "cpf", "phone", "program"}))
        await wizard.choose_slot(session, payload.date, payload.time)
        booking = await wizard.confirm(session)
    except SchedulingClosed as e:
        raise HTTPException(status_code=403, detail=str(e))
    except SlotConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except BookingValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except BookingPersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return {
        "status": "success",
        "stored_locally": session.stored_locally,
        "booking": booking.to_record(),
    }


@app.post("/api/admin/login")
async def admin_login(payload: LoginRequest, gate: AccessGate = Depends(get_gate)):
    try:
        token = gate.login(payload.password)
    except AccessDenied as e:
        raise HTTPException(status_code=401, detail=str(e))
    return {"status": "success", "token": token.token, "expires_at": token.expires_at.isoformat()}


@app.post("/api/admin/logout")
async def admin_logout(x_admin_token: str = Header(...), gate: AccessGate = Depends(get_gate)):
    gate.revoke(x_admin_token)
    return {"status": "success"}


@app.get("/api/admin/bookings")
async def admin_bookings(
    x_admin_token: str = Header(...),
    filters: BookingFilters = Depends(),
    sort: Optional[str] = None,
    direction: str = "asc",
    panel: AdminPanel = Depends(get_admin_panel),
):
    if sort and sort not in SORTABLE_FIELDS:
        raise HTTPException(status_code=400, detail=f"Campo de ordenação inválido: {sort}")
    if direction not in ("asc", "desc"):
        raise HTTPException(status_code=400, detail=f"Direção inválida: {direction}")
    sort_state = SortState(key=sort, direction=direction) if sort else None
    try:
        bookings = await panel.list_bookings(x_admin_token, filters, sort_state)
    except AccessDenied as e:
        raise HTTPException(status_code=401, detail=str(e))
    return {
        "status": "success",
        "count": len(bookings),
        "bookings": [b.to_record() for b in bookings],
    }


@app.delete("/api/admin/bookings/{booking_id}")
async def admin_delete_booking(
    booking_id: str,
    x_admin_token: str = Header(...),
    panel: AdminPanel = Depends(get_admin_panel),
):
    try:
        result = await panel.delete(x_admin_token, booking_id)
    except AccessDenied as e:
        raise HTTPException(status_code=401, detail=str(e))
    if not result.ok:
        raise HTTPException(status_code=500, detail="Não foi possível excluir o agendamento.")
    return {"status": "success", "outcome": result.outcome.value}


@app.post("/api/admin/bookings/delete-all")
async def admin_delete_all(
    payload: DeleteAllRequest,
    x_admin_token: str = Header(...),
    panel: AdminPanel = Depends(get_admin_panel),
):
    try:
        result = await panel.delete_all(x_admin_token, payload.password)
    except AccessDenied as e:
        raise HTTPException(status_code=401, detail=str(e))
    except Exception as e:
        logger.error(f"Error deleting all bookings: {e}")
        raise HTTPException(status_code=500, detail="Não foi possível apagar os registros. Tente novamente.")
    return {"status": "success", "deleted": result.value}


@app.get("/api/admin/status")
async def admin_status(x_admin_token: str = Header(...), panel: AdminPanel = Depends(get_admin_panel)):
    try:
        status = await panel.get_status(x_admin_token)
    except AccessDenied as e:
        raise HTTPException(status_code=401, detail=str(e))
    return {"status": "success", "system_status": status.value}


@app.post("/api/admin/status/toggle")
async def admin_toggle_status(x_admin_token: str = Header(...), panel: AdminPanel = Depends(get_admin_panel)):
    try:
        result = await panel.toggle_status(x_admin_token)
    except AccessDenied as e:
        raise HTTPException(status_code=401, detail=str(e))
    if not result.ok:
        raise HTTPException(status_code=500, detail="Não foi possível atualizar o status. Tente novamente.")
    return {"status": "success", "system_status": result.value.value}


@app.get("/api/admin/config")
async def admin_get_config(x_admin_token: str = Header(...), panel: AdminPanel = Depends(get_admin_panel)):
    try:
        config = await panel.get_config(x_admin_token)
    except AccessDenied as e:
        raise HTTPException(status_code=401, detail=str(e))
    return {"status": "success", "config": config.to_document()}


@app.put("/api/admin/config")
async def admin_save_config(
    config: AgendaConfig,
    x_admin_token: str = Header(...),
    panel: AdminPanel = Depends(get_admin_panel),
):
    try:
        result = await panel.save_config(x_admin_token, config)
    except AccessDenied as e:
        raise HTTPException(status_code=401, detail=str(e))
    except AgendaConfigError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not result.ok:
        raise HTTPException(status_code=500, detail="Falha ao salvar a configuração.")
    return {"status": "success", "config": config.to_document()}


@app.get("/api/admin/export")
async def admin_export(
    x_admin_token: str = Header(...),
    filters: BookingFilters = Depends(),
    panel: AdminPanel = Depends(get_admin_panel),
):
    try:
        filename, content = await panel.export(x_admin_token, filters)
    except AccessDenied as e:
        raise HTTPException(status_code=401, detail=str(e))
    return StreamingResponse(
        iter([content]),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={
            "Content-Disposition": f"attachment; filename={filename}",
            "Cache-Control": "no-cache",
        },
    )


def run():
    import uvicorn

    uvicorn.run("agendamento.main:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
