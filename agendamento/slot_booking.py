import logging
from datetime import date, timedelta
from typing import Iterable, List, Union

from agendamento.errors import SlotConflict
from agendamento.models.agenda import AgendaConfig
from agendamento.models.available import DaySchedule, TimeSlot
from agendamento.models.booking import Booking, SlotSelection

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 30

DateLike = Union[date, str]


def _iso(value: DateLike) -> str:
    return value.isoformat() if isinstance(value, date) else str(value)


def _weekday(day: date) -> int:
    """0=Sunday .. 6=Saturday"""
    return (day.weekday() + 1) % 7


def generate_dates(config: AgendaConfig) -> List[date]:
    """Dates in [start_date, end_date] falling on an allowed weekday."""
    allowed = set(config.days_of_week)
    dates = []
    day = config.start_date
    while day <= config.end_date:
        if _weekday(day) in allowed:
            dates.append(day)
        day += timedelta(days=1)
    return dates


def generate_time_slots(config: AgendaConfig) -> List[str]:
    """
    "HH:MM" grid from start_hour:00 to end_hour:00 stepping by interval.

    The closing end_hour:00 slot is always present, and nothing past it.
    """
    interval = config.interval if config.interval and config.interval > 0 else DEFAULT_INTERVAL
    start, end = config.start_hour, config.end_hour

    slots: List[str] = []
    for hour in range(start, end + 1):
        for minute in range(0, 60, interval):
            if hour == end and minute > 0:
                continue
            slots.append(f"{hour:02d}:{minute:02d}")

    end_time = f"{end:02d}:00"
    if end_time not in slots:
        slots.append(end_time)

    return list(dict.fromkeys(slots))


def is_booked(bookings: Iterable[Booking], day: DateLike, time: str) -> bool:
    day_str = _iso(day)
    return any(b.date == day_str and b.time == time for b in bookings)


def select_slot(day: DateLike, time: str, bookings: Iterable[Booking]) -> SlotSelection:
    """Pick a slot for the confirmation step, refusing one that is already taken."""
    if is_booked(bookings, day, time):
        raise SlotConflict(_iso(day), time)
    return SlotSelection(date=_iso(day), time=time)


def build_day_schedule(config: AgendaConfig, bookings: List[Booking], day: date) -> DaySchedule:
    return DaySchedule(
        date=day,
        slots=[TimeSlot(time=t, booked=is_booked(bookings, day, t)) for t in generate_time_slots(config)],
    )


class AvailabilityChecker:
    """Reconciles the agenda grid against the current bookings.

    Config and bookings are read once per `load()`, the same way a page load
    reads them; nothing is cached beyond that.
    """

    def __init__(self, booking_manager):
        self.booking_manager = booking_manager
        self.config: AgendaConfig = AgendaConfig()
        self.bookings: List[Booking] = []

    async def load(self) -> "AvailabilityChecker":
        self.config = await self.booking_manager.get_agenda_config()
        result = await self.booking_manager.list_bookings()
        self.bookings = result.value or []
        logger.info(
            f"Availability loaded: {len(self.bookings)} bookings"
            f"{' (local cache)' if result.degraded else ''}"
        )
        return self

    def available_dates(self) -> List[date]:
        return generate_dates(self.config)

    def time_slots(self) -> List[str]:
        return generate_time_slots(self.config)

    def slots_for_date(self, day: DateLike) -> DaySchedule:
        if isinstance(day, str):
            day = date.fromisoformat(day)
        return build_day_schedule(self.config, self.bookings, day)

    def offers_date(self, day: DateLike) -> bool:
        if isinstance(day, str):
            try:
                day = date.fromisoformat(day)
            except ValueError:
                return False
        return day in self.available_dates()

    def is_offered(self, day: DateLike, time: str) -> bool:
        """Whether (day, time) belongs to the configured grid at all."""
        return self.offers_date(day) and time in self.time_slots()

    def select(self, day: DateLike, time: str) -> SlotSelection:
        return select_slot(day, time, self.bookings)
