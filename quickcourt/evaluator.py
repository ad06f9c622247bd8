"""Slot availability, pricing and status-transition rules for court reservations.

Every function here is pure: inputs are plain values, nothing is fetched or stored.
"""

import logging
import re
from datetime import date, datetime, time
from typing import Dict, FrozenSet, Iterable, Optional, Tuple

from quickcourt.errors import InvalidTimeFormat, InvalidTimeRange
from quickcourt.models import (
    TIME_PATTERN,
    AddOnCosts,
    AddOnCostTable,
    AddOns,
    BookableResult,
    OperatingSchedule,
    PriceBreakdown,
    PricingConfig,
    PricingRules,
    RejectionReason,
    Reservation,
    ReservationStatus,
    Tier,
    js_weekday,
)

logger = logging.getLogger(__name__)

WEEKEND_DAYS = (0, 6)  # Sunday, Saturday

ALLOWED_TRANSITIONS: Dict[ReservationStatus, FrozenSet[ReservationStatus]] = {
    ReservationStatus.PENDING: frozenset({ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED}),
    ReservationStatus.CONFIRMED: frozenset(
        {ReservationStatus.COMPLETED, ReservationStatus.CANCELLED, ReservationStatus.NO_SHOW}
    ),
    ReservationStatus.COMPLETED: frozenset(),
    ReservationStatus.CANCELLED: frozenset(),
    ReservationStatus.NO_SHOW: frozenset(),
}


def parse_time(value: str) -> time:
    """Parses a zero-padded 24-hour HH:MM string."""
    if not isinstance(value, str) or not re.fullmatch(TIME_PATTERN, value):
        raise InvalidTimeFormat(f"Invalid time '{value}', expected HH:MM")
    return datetime.strptime(value, "%H:%M").time()


def _parse_range(start_time: str, end_time: str) -> Tuple[time, time]:
    start = parse_time(start_time)
    end = parse_time(end_time)
    if start >= end:
        raise InvalidTimeRange(f"Start time {start_time} must be before end time {end_time}")
    return start, end


def duration_hours(start_time: str, end_time: str) -> float:
    """Length of the range in fractional hours, unrounded."""
    start, end = _parse_range(start_time, end_time)
    delta = datetime.combine(date.min, end) - datetime.combine(date.min, start)
    return delta.total_seconds() / 3600


def overlaps(a_start: str, a_end: str, b_start: str, b_end: str) -> bool:
    """Checks whether two half-open [start, end) ranges overlap.

    Ranges that only touch (one ends exactly when the other starts) do not overlap,
    so back-to-back bookings are allowed.
    """
    return parse_time(a_start) < parse_time(b_end) and parse_time(a_end) > parse_time(b_start)


def is_weekend(day: date) -> bool:
    return js_weekday(day) in WEEKEND_DAYS


def is_bookable(
    schedule: OperatingSchedule,
    day: date,
    start_time: str,
    end_time: str,
    existing_reservations: Iterable[Reservation],
) -> BookableResult:
    """Decides whether the court can take a reservation for the given range.

    Args:
        schedule: Operating schedule of the court.
        day: Date of the candidate reservation.
        start_time: Start in HH:MM, must be before end_time.
        end_time: End in HH:MM.
        existing_reservations: Reservations on the same court. Only pending and
            confirmed ones dated `day` block the slot; any others are ignored.

    Returns:
        BookableResult with the rejection reason (and the first conflicting
        reservation, for conflicts) when the range cannot be booked.

    Raises:
        InvalidTimeRange: start_time is not before end_time.
    """
    _parse_range(start_time, end_time)

    if schedule.for_date(day).closed:
        logger.debug(f"Court closed on {day.isoformat()}")
        return BookableResult(bookable=False, reason=RejectionReason.CLOSED_DAY)

    for reservation in existing_reservations:
        if not reservation.is_occupying or reservation.date != day:
            continue
        if overlaps(start_time, end_time, reservation.start_time, reservation.end_time):
            logger.debug(
                f"{start_time}-{end_time} conflicts with {reservation.start_time}-{reservation.end_time} "
                f"({reservation.status.value})"
            )
            return BookableResult(bookable=False, reason=RejectionReason.CONFLICT, conflicting=reservation)

    return BookableResult(bookable=True)


def select_unit_price(
    pricing: PricingRules, day: date, start_time: str, pricing_config: PricingConfig
) -> Tuple[Tier, float]:
    """Picks the hourly rate from the reservation date and its start hour only.

    Weekend beats peak, peak beats base. An unset weekend or peak price falls back
    to the base price.
    """
    if is_weekend(day):
        if pricing.weekend_price is not None:
            return Tier.WEEKEND, pricing.weekend_price
        return Tier.BASE, pricing.base_price

    hour = parse_time(start_time).hour
    if pricing_config.peak_start_hour <= hour <= pricing_config.peak_end_hour:
        if pricing.peak_hour_price is not None:
            return Tier.PEAK, pricing.peak_hour_price
        return Tier.BASE, pricing.base_price

    return Tier.BASE, pricing.base_price


def compute_add_on_costs(
    add_ons: AddOns, cost_table: AddOnCostTable, hours: float, pricing_config: PricingConfig
) -> AddOnCosts:
    equipment = 0.0
    lighting = 0.0
    coaching = 0.0
    cleaning = 0.0

    if add_ons.equipment and cost_table.equipment_rental_cost is not None:
        equipment = cost_table.equipment_rental_cost * hours
    if add_ons.lighting and cost_table.lighting_additional_cost is not None:
        lighting = cost_table.lighting_additional_cost * hours
    if add_ons.coaching:
        coaching = pricing_config.coaching_rate_per_hour * hours
    if add_ons.cleaning:
        # Flat fee, independent of duration
        cleaning = pricing_config.cleaning_flat_fee

    return AddOnCosts(equipment=equipment, lighting=lighting, coaching=coaching, cleaning=cleaning)


def compute_price(
    pricing: PricingRules,
    day: date,
    start_time: str,
    end_time: str,
    add_ons: Optional[AddOns] = None,
    add_on_cost_table: Optional[AddOnCostTable] = None,
    pricing_config: Optional[PricingConfig] = None,
) -> PriceBreakdown:
    """Prices a reservation. No rounding is applied to any amount."""
    add_ons = add_ons or AddOns()
    add_on_cost_table = add_on_cost_table or AddOnCostTable()
    pricing_config = pricing_config or PricingConfig()

    hours = duration_hours(start_time, end_time)
    tier, unit_price = select_unit_price(pricing, day, start_time, pricing_config)
    base_cost = unit_price * hours
    add_on_costs = compute_add_on_costs(add_ons, add_on_cost_table, hours, pricing_config)

    return PriceBreakdown(
        tier=tier,
        unit_price=unit_price,
        duration_hours=hours,
        base_cost=base_cost,
        add_on_costs=add_on_costs,
        total_amount=base_cost + add_on_costs.total,
        currency=pricing.currency,
    )


def next_valid_status(current_status, requested_status) -> bool:
    """Returns True iff a reservation in current_status may move to requested_status."""
    try:
        current = ReservationStatus(current_status)
        requested = ReservationStatus(requested_status)
    except ValueError:
        logger.warning(f"Unknown reservation status in transition {current_status} -> {requested_status}")
        return False
    return requested in ALLOWED_TRANSITIONS[current]
