from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from agendamento.errors import BookingValidationError


def digits_only(value: Optional[str]) -> str:
    return ''.join(filter(str.isdigit, value or ""))


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class Program(str, Enum):
    FIES = "FIES"
    PROUNI = "PROUNI"


class BookingCreate(BaseModel):
    """Applicant form payload, validated in the order the form checks it."""
    model_config = ConfigDict(validate_default=True)

    name: Optional[str] = None
    cpf: Optional[str] = None
    phone: Optional[str] = None
    program: Optional[str] = None

    @field_validator("name")
    def validate_name(cls, v):
        if not v or not v.strip():
            raise BookingValidationError("Por favor, preencha o nome completo.")
        return v.strip()

    @field_validator("cpf")
    def validate_cpf(cls, v):
        clean = digits_only(v)
        if len(clean) != 11:
            raise BookingValidationError("CPF deve conter 11 dígitos.")
        return clean

    @field_validator("phone")
    def validate_phone(cls, v):
        clean = digits_only(v)
        if not 10 <= len(clean) <= 11:
            raise BookingValidationError("Telefone inválido. Insira DDD + número.")
        return clean

    @field_validator("program")
    def validate_program(cls, v):
        if not v:
            raise BookingValidationError("Por favor, selecione um programa (FIES ou PROUNI).")
        try:
            return Program(v.strip().upper()).value
        except ValueError:
            raise BookingValidationError("Por favor, selecione um programa (FIES ou PROUNI).")


class Booking(BaseModel):
    """A stored booking. Serialized with the document field names (`createdAt`)."""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, description="Store-assigned document ID")
    name: str
    cpf: str
    phone: str = ""
    program: str
    date: str = Field(..., description="YYYY-MM-DD")
    time: str = Field(..., description="HH:MM")
    created_at: Optional[str] = Field(None, alias="createdAt")

    @field_validator("phone", mode="before")
    def default_phone(cls, v):
        return v or ""

    @field_validator("created_at", mode="before")
    def stringify_created_at(cls, v):
        if isinstance(v, datetime):
            return v.isoformat()
        return v

    def to_record(self) -> dict:
        return self.model_dump(by_alias=True)


class SlotSelection(BaseModel):
    date: str
    time: str


def validate_form(data: dict) -> BookingCreate:
    """Validate the applicant form, surfacing only the first message."""
    try:
        return BookingCreate(**data)
    except ValidationError as e:
        first = e.errors()[0]
        error = (first.get("ctx") or {}).get("error")
        if isinstance(error, BookingValidationError):
            raise error from e
        message = str(error) if error else first.get("msg", "Dados inválidos.")
        raise BookingValidationError(message) from e
