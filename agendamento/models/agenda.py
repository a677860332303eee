from datetime import date
from enum import Enum
from typing import List
from pydantic import BaseModel, ConfigDict, Field, field_validator

from agendamento.errors import AgendaConfigError

ALLOWED_INTERVALS = (15, 20, 30, 60)


class SystemStatus(str, Enum):
    """Process-wide switch gating new bookings."""
    ON = "ON"
    OFF = "OFF"

    def toggled(self) -> "SystemStatus":
        return SystemStatus.OFF if self is SystemStatus.ON else SystemStatus.ON


class AgendaConfig(BaseModel):
    """Admin-defined window and grid of offerable dates/times.

    Field names on the wire are camelCase (`startDate`, `daysOfWeek`, ...).
    Weekdays use 0=Sunday .. 6=Saturday. The range is not checked here so an
    inverted window simply offers no dates; `check()` enforces it before saving.
    """
    model_config = ConfigDict(populate_by_name=True)

    start_date: date = Field(date(2026, 2, 2), alias="startDate")
    end_date: date = Field(date(2026, 2, 20), alias="endDate")
    days_of_week: List[int] = Field(default_factory=lambda: [1, 2, 3, 4, 5], alias="daysOfWeek")
    start_hour: int = Field(11, ge=0, le=23, alias="startHour")
    end_hour: int = Field(18, ge=0, le=23, alias="endHour")
    interval: int = Field(30, description="Slot length in minutes")

    @field_validator("days_of_week")
    def validate_days(cls, v):
        days = sorted({int(d) for d in v})
        if any(d < 0 or d > 6 for d in days):
            raise ValueError("Weekdays must be between 0 (Sunday) and 6 (Saturday)")
        return days

    def check(self) -> "AgendaConfig":
        """Raise AgendaConfigError unless the config is safe to persist."""
        if self.start_date > self.end_date:
            raise AgendaConfigError("Data inicial maior que final")
        if self.start_hour >= self.end_hour:
            raise AgendaConfigError("Hora inicial deve ser menor que hora final")
        if not self.days_of_week:
            raise AgendaConfigError("Selecione ao menos 1 dia da semana")
        if self.interval not in ALLOWED_INTERVALS:
            raise AgendaConfigError(
                f"Intervalo deve ser um de: {', '.join(str(i) for i in ALLOWED_INTERVALS)}"
            )
        return self

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")

    @classmethod
    def from_document(cls, data: dict) -> "AgendaConfig":
        """Merge a stored document over the defaults."""
        merged = DEFAULT_AGENDA.to_document()
        merged.update({k: v for k, v in (data or {}).items() if v is not None})
        return cls.model_validate(merged)


DEFAULT_AGENDA = AgendaConfig()
