import re
from datetime import date, datetime
from typing import Union

from agendamento.models.booking import digits_only


def format_cpf(cpf: str) -> str:
    """12345678901 -> 123.456.789-01. Anything that is not 11 digits is returned as digits."""
    digits = digits_only(cpf)
    return re.sub(r"^(\d{3})(\d{3})(\d{3})(\d{2})$", r"\1.\2.\3-\4", digits)


def format_phone(phone: str) -> str:
    """Brazilian mobile (11 digits) or landline (10 digits) with area code."""
    digits = digits_only(phone)
    if len(digits) == 11:
        return re.sub(r"(\d{2})(\d{5})(\d{4})", r"(\1) \2-\3", digits)
    if len(digits) == 10:
        return re.sub(r"(\d{2})(\d{4})(\d{4})", r"(\1) \2-\3", digits)
    return phone or ""


def format_date_br(value: Union[str, date]) -> str:
    if isinstance(value, str):
        value = datetime.strptime(value, "%Y-%m-%d").date()
    return value.strftime("%d/%m/%Y")
