import logging
from datetime import date
from io import BytesIO
from typing import List, Optional

import pandas as pd
from openpyxl.utils import get_column_letter

from agendamento.formatting import format_cpf, format_date_br, format_phone
from agendamento.models.booking import Booking

logger = logging.getLogger(__name__)

SHEET_NAME = "Agendamentos"

COLUMNS = [
    ("Programa", 15),
    ("Nome", 40),
    ("CPF", 20),
    ("Telefone Celular", 20),
    ("Data do agendamento", 20),
    ("Horário do agendamento", 20),
]


def export_filename(today: Optional[date] = None) -> str:
    return f"agendamentos_{(today or date.today()).isoformat()}.xlsx"


def build_export_frame(bookings: List[Booking]) -> pd.DataFrame:
    rows = [
        {
            "Programa": b.program,
            "Nome": b.name,
            "CPF": format_cpf(b.cpf),
            "Telefone Celular": format_phone(b.phone or ""),
            "Data do agendamento": format_date_br(b.date),
            "Horário do agendamento": b.time,
        }
        for b in bookings
    ]
    return pd.DataFrame(rows, columns=[name for name, _ in COLUMNS])


def export_to_excel(bookings: List[Booking]) -> bytes:
    """Render the bookings as a single-sheet workbook held in memory."""
    frame = build_export_frame(bookings)
    output = BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name=SHEET_NAME, index=False)
        worksheet = writer.sheets[SHEET_NAME]
        for index, (_, width) in enumerate(COLUMNS, start=1):
            worksheet.column_dimensions[get_column_letter(index)].width = width

    logger.info(f"Exported {len(frame)} bookings")
    return output.getvalue()
