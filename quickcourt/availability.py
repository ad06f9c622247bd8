import logging
from datetime import date, datetime
from typing import Iterable, List

from quickcourt.evaluator import overlaps, parse_time
from quickcourt.models import Court, DayAvailability, Reservation, TimeSlot

logger = logging.getLogger(__name__)

CLOSED_MESSAGE = "Court is closed on this day"


def build_hourly_slots(open_time: str, close_time: str) -> List[tuple]:
    """Generates one-hour (start, end) pairs from the opening hour up to the closing hour."""
    start_hour = parse_time(open_time).hour
    end_hour = parse_time(close_time).hour

    slots = []
    for hour in range(start_hour, end_hour):
        slots.append((f"{hour:02d}:00", f"{hour + 1:02d}:00"))

    logger.debug(f"Generated {len(slots)} slots between {open_time} and {close_time}")
    return slots


def get_day_availability(court: Court, day: date, reservations: Iterable[Reservation]) -> DayAvailability:
    """Builds the hourly availability grid of a court for a single date."""
    schedule = court.operating_hours.for_date(day)

    if schedule.closed:
        return DayAvailability(
            court_id=court.id,
            court_name=court.name,
            date=day,
            available=False,
            message=CLOSED_MESSAGE,
        )

    occupying = [r for r in reservations if r.is_occupying and r.date == day]

    slots = []
    for slot_start, slot_end in build_hourly_slots(schedule.open_time, schedule.close_time):
        is_conflict = any(overlaps(slot_start, slot_end, r.start_time, r.end_time) for r in occupying)
        slots.append(TimeSlot(start_time=slot_start, end_time=slot_end, available=not is_conflict))

    return DayAvailability(
        court_id=court.id,
        court_name=court.name,
        date=day,
        available=any(s.available for s in slots),
        open_time=schedule.open_time,
        close_time=schedule.close_time,
        slots=slots,
        existing_bookings=[r.time_range for r in occupying],
    )


def free_slots(day_availability: DayAvailability) -> List[str]:
    return [s.start_time for s in day_availability.slots if s.available]


def is_open_at(court: Court, when: datetime) -> bool:
    """Checks the court's opening hours for a local wall-clock moment, both ends inclusive."""
    schedule = court.operating_hours.for_date(when.date())
    if schedule.closed:
        return False
    current = when.strftime("%H:%M")
    return schedule.open_time <= current <= schedule.close_time
