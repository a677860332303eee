from datetime import date
from io import BytesIO

from openpyxl import load_workbook

from agendamento.excel import build_export_frame, export_filename, export_to_excel
from agendamento.formatting import format_cpf, format_date_br, format_phone
from agendamento.models.booking import Booking
from tests.fakes import booking_doc


def test_format_cpf():
    assert format_cpf("12345678901") == "123.456.789-01"
    assert format_cpf("123") == "123"


def test_format_phone_brazilian_patterns():
    assert format_phone("11987654321") == "(11) 98765-4321"
    assert format_phone("1133334444") == "(11) 3333-4444"
    assert format_phone("12345") == "12345"
    assert format_phone("") == ""


def test_format_date_br():
    assert format_date_br("2026-02-02") == "02/02/2026"
    assert format_date_br(date(2026, 12, 31)) == "31/12/2026"


def test_export_filename():
    assert export_filename(date(2026, 2, 2)) == "agendamentos_2026-02-02.xlsx"


def test_frame_row_for_single_booking():
    booking = Booking.model_validate(booking_doc(id="1", phone=""))
    frame = build_export_frame([booking])

    assert list(frame.columns) == [
        "Programa",
        "Nome",
        "CPF",
        "Telefone Celular",
        "Data do agendamento",
        "Horário do agendamento",
    ]
    assert frame.iloc[0].tolist() == ["FIES", "Ana Silva", "123.456.789-01", "", "02/02/2026", "11:00"]


def test_workbook_layout():
    bookings = [Booking.model_validate(booking_doc(id="1"))]

    workbook = load_workbook(BytesIO(export_to_excel(bookings)))

    assert workbook.sheetnames == ["Agendamentos"]
    sheet = workbook["Agendamentos"]
    assert sheet["A1"].value == "Programa"
    assert sheet["C2"].value == "123.456.789-01"
    assert sheet["D2"].value == "(11) 98765-4321"
    assert sheet.column_dimensions["B"].width == 40


def test_empty_export_keeps_headers():
    sheet = load_workbook(BytesIO(export_to_excel([])))["Agendamentos"]
    assert sheet["F1"].value == "Horário do agendamento"
    assert sheet.max_row == 1
