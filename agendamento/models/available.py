from dataclasses import dataclass, field
from datetime import date
from typing import List


@dataclass
class TimeSlot:
    """One grid time on a given date, with its booked flag."""
    time: str
    booked: bool = False


@dataclass
class DaySchedule:
    """Type-safe result for a per-date availability lookup."""
    date: date
    slots: List[TimeSlot] = field(default_factory=list)

    @property
    def iso_date(self) -> str:
        return self.date.isoformat()

    @property
    def free_times(self) -> List[str]:
        return [slot.time for slot in self.slots if not slot.booked]
