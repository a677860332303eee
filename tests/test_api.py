from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from openpyxl import load_workbook

from agendamento.admin import AdminPanel
from agendamento.main import app, get_admin_panel, get_booking_manager, get_gate
from tests.fakes import ADMIN_PASSWORD, booking_doc

APPLICANT = {
    "name": "Ana Silva",
    "cpf": "12345678901",
    "phone": "11987654321",
    "program": "FIES",
    "date": "2026-02-02",
    "time": "11:00",
}


@pytest.fixture
def client(manager, gate):
    app.dependency_overrides[get_booking_manager] = lambda: manager
    app.dependency_overrides[get_gate] = lambda: gate
    app.dependency_overrides[get_admin_panel] = lambda: AdminPanel(manager, gate)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(client):
    resp = client.post("/api/admin/login", json={"password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    return {"X-Admin-Token": resp.json()["token"]}


def test_agenda_lists_default_window(client):
    body = client.get("/api/agenda").json()

    assert body["dates"][0] == "2026-02-02"
    assert body["dates"][-1] == "2026-02-20"
    assert body["times"][0] == "11:00"
    assert body["times"][-1] == "18:00"


def test_booking_then_slot_is_taken(client):
    resp = client.post("/api/bookings", json=APPLICANT)

    assert resp.status_code == 201
    body = resp.json()
    assert body["booking"]["id"]
    assert body["booking"]["createdAt"]
    assert body["stored_locally"] is False

    slots = client.get("/api/slots", params={"date": "2026-02-02"}).json()["slots"]
    assert {"time": "11:00", "booked": True} in slots
    assert {"time": "11:30", "booked": False} in slots


def test_booking_errors_map_to_status_codes(client, remote):
    remote.add_booking(booking_doc(cpf="99999999999", date="2026-02-02", time="11:00"))

    assert client.post("/api/bookings", json={**APPLICANT, "cpf": "123"}).status_code == 400
    assert client.post("/api/bookings", json=APPLICANT).status_code == 409
    assert client.post("/api/bookings", json={**APPLICANT, "cpf": "99999999999", "time": "11:30"}).status_code == 400

    remote.set_document("status", {"status": "OFF"})
    assert client.post("/api/bookings", json={**APPLICANT, "time": "11:30"}).status_code == 403


def test_invalid_slot_date(client):
    assert client.get("/api/slots", params={"date": "02/02/2026"}).status_code == 400


def test_slots_outside_agenda(client):
    assert client.get("/api/slots", params={"date": "2026-02-07"}).status_code == 404
    assert client.get("/api/slots", params={"date": "2026-03-02"}).status_code == 404


def test_admin_login_rejected(client):
    resp = client.post("/api/admin/login", json={"password": "errada"})
    assert resp.status_code == 401


def test_admin_requires_token(client):
    resp = client.get("/api/admin/bookings", headers={"X-Admin-Token": "nope"})
    assert resp.status_code == 401


def test_admin_filter_sort_and_delete(client, admin_headers, remote):
    remote.add_booking(booking_doc(name="Bruno", cpf="11111111111", program="PROUNI"))
    remote.add_booking(booking_doc(name="Ana", cpf="22222222222", time="11:30"))
    remote.add_booking(booking_doc(name="Carla", cpf="33333333333", time="12:00", program="PROUNI"))

    body = client.get(
        "/api/admin/bookings",
        headers=admin_headers,
        params={"program": "prouni", "sort": "name", "direction": "desc"},
    ).json()
    assert [b["name"] for b in body["bookings"]] == ["Carla", "Bruno"]

    assert client.get("/api/admin/bookings", headers=admin_headers, params={"sort": "id"}).status_code == 400

    booking_id = body["bookings"][0]["id"]
    assert client.delete(f"/api/admin/bookings/{booking_id}", headers=admin_headers).status_code == 200
    assert client.get("/api/admin/bookings", headers=admin_headers).json()["count"] == 2


def test_admin_delete_all(client, admin_headers, remote):
    remote.add_booking(booking_doc())

    resp = client.post("/api/admin/bookings/delete-all", headers=admin_headers, json={"password": "errada"})
    assert resp.status_code == 401

    resp = client.post("/api/admin/bookings/delete-all", headers=admin_headers, json={"password": ADMIN_PASSWORD})
    assert resp.json()["deleted"] == 1
    assert remote.records == {}


def test_admin_status_and_config(client, admin_headers):
    assert client.get("/api/admin/status", headers=admin_headers).json()["system_status"] == "ON"
    assert client.post("/api/admin/status/toggle", headers=admin_headers).json()["system_status"] == "OFF"

    bad = {"startDate": "2026-03-10", "endDate": "2026-03-01", "daysOfWeek": [1], "startHour": 9,
           "endHour": 12, "interval": 30}
    assert client.put("/api/admin/config", headers=admin_headers, json=bad).status_code == 400

    good = {**bad, "startDate": "2026-02-23"}
    assert client.put("/api/admin/config", headers=admin_headers, json=good).status_code == 200
    assert client.get("/api/admin/config", headers=admin_headers).json()["config"] == good


def test_admin_export_streams_filtered_workbook(client, admin_headers, remote):
    remote.add_booking(booking_doc(cpf="11111111111", program="FIES"))
    remote.add_booking(booking_doc(cpf="22222222222", program="PROUNI", time="11:30"))

    fies = client.get("/api/admin/export", headers=admin_headers, params={"program": "FIES"})
    prouni = client.get("/api/admin/export", headers=admin_headers, params={"program": "PROUNI"})

    assert fies.status_code == 200
    assert fies.headers["content-disposition"].startswith("attachment; filename=agendamentos_")
    fies_sheet = load_workbook(BytesIO(fies.content))["Agendamentos"]
    prouni_sheet = load_workbook(BytesIO(prouni.content))["Agendamentos"]
    assert fies_sheet["A2"].value == "FIES"
    assert prouni_sheet["A2"].value == "PROUNI"
    assert fies_sheet.max_row == prouni_sheet.max_row == 2
