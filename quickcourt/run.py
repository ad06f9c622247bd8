import logging
import sys
from datetime import date, datetime
from typing import List, Optional, Tuple

from quickcourt import client, persist
from quickcourt.analytics import summarize_bookings
from quickcourt.availability import free_slots, get_day_availability
from quickcourt.bookings import quote_booking
from quickcourt.errors import QuickCourtError
from quickcourt.evaluator import next_valid_status
from quickcourt.models import (
    AddOns,
    BookingAnalytics,
    BookingQuote,
    Court,
    DayAvailability,
    Reservation,
    ReservationRequest,
)

logger = logging.getLogger(__name__)


def parse_date(date_str: str) -> date:
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError:
        logger.error("Error: Date must be in YYYY-MM-DD format.")
        sys.exit(1)


def load_inputs(
    day: date,
    court_id: str | None = None,
    court_file: str | None = None,
    bookings_file: str | None = None,
) -> Tuple[Court, List[Reservation]]:
    """Loads the court and its reservations on `day`, from the API or from JSON files."""
    if court_id:
        court = client.fetch_court(court_id)
        reservations = client.fetch_reservations(court_id, day.isoformat()) if court else None
    elif court_file:
        court = persist.load_court(court_file)
        reservations = persist.load_reservations(bookings_file, day) if bookings_file else []
    else:
        logger.error("Either a court id or a court file is required.")
        sys.exit(1)

    if court is None:
        logger.error("Could not load court. Exiting.")
        sys.exit(1)
    if reservations is None:
        logger.error("Could not load reservations. Exiting.")
        sys.exit(1)

    # Only reservations on the requested day are relevant.
    reservations = [r for r in reservations if r.date == day]
    return court, reservations


def print_availability_report(day_data: DayAvailability):
    """Prints the formatted availability grid to stdout."""
    date_str = day_data.date.isoformat()
    title = f"{day_data.court_name} " if day_data.court_name else ""

    print(f"\n--- {title}Availability Report for {date_str} ---")

    if day_data.message:
        print(day_data.message)
        return

    print(f"Open {day_data.open_time} - {day_data.close_time}")
    for slot in day_data.slots:
        prefix = "[AVAILABLE]" if slot.available else "[BOOKED]   "
        print(f"{prefix} {slot.start_time}-{slot.end_time}")

    free = free_slots(day_data)
    if free:
        print(f"Summary: Found {len(free)} available time slots for {date_str}!")
    else:
        print(f"Summary: No slots available for {date_str}.")


def print_quote(quote: BookingQuote):
    """Prints the price breakdown of a quote to stdout."""
    price = quote.price
    request = quote.request

    print(f"\n--- Quote for {request.date.isoformat()} {request.start_time}-{request.end_time} ---")
    print(f"Duration:   {price.duration_hours:g} h")
    print(f"Rate:       {price.unit_price:g} {price.currency}/h ({price.tier.value})")
    print(f"Court:      {price.base_cost:g} {price.currency}")
    for name, cost in price.add_on_costs.model_dump().items():
        if cost:
            print(f"{name.capitalize() + ':':<11} {cost:g} {price.currency}")
    print(f"Total:      {price.total_amount:g} {price.currency}")


def print_analytics_report(summary: BookingAnalytics):
    """Prints the booking summary to stdout."""
    print(f"\n--- Booking Summary for the last {summary.period} days ---")
    print(f"Bookings:   {summary.total_bookings}")
    print(f"Revenue:    {summary.total_revenue:g} (average {summary.average_booking_value:g})")
    print(
        f"Status:     {summary.confirmed_bookings} confirmed, {summary.pending_bookings} pending, "
        f"{summary.completed_bookings} completed, {summary.cancelled_bookings} cancelled, "
        f"{summary.no_show_bookings} no-show"
    )
    print(
        f"Payments:   {summary.paid_bookings} paid, {summary.pending_payments} pending, "
        f"{summary.failed_payments} failed"
    )

    if summary.hour_stats:
        busiest = max(summary.hour_stats, key=summary.hour_stats.get)
        print(f"Busiest hour: {busiest:02d}:00 ({summary.hour_stats[busiest]} bookings)")
    for sport, count in sorted(summary.sport_type_stats.items()):
        print(f"{sport + ':':<11} {count} bookings")


def run_availability(
    date_str: str,
    court_id: str | None = None,
    court_file: str | None = None,
    bookings_file: str | None = None,
) -> DayAvailability:
    day = parse_date(date_str)
    court, reservations = load_inputs(day, court_id, court_file, bookings_file)
    logger.info(f"Checking availability of {court.name or court.id} on {date_str}")

    day_data = get_day_availability(court, day, reservations)
    print_availability_report(day_data)
    return day_data


def run_quote(
    date_str: str,
    start_time: str,
    end_time: str,
    add_ons: Optional[AddOns] = None,
    court_id: str | None = None,
    court_file: str | None = None,
    bookings_file: str | None = None,
) -> Optional[BookingQuote]:
    """Quotes a booking request and saves the quote. Returns None if it is rejected."""
    day = parse_date(date_str)
    court, reservations = load_inputs(day, court_id, court_file, bookings_file)

    try:
        request = ReservationRequest(
            court_id=court.id or court_id,
            date=day,
            start_time=start_time,
            end_time=end_time,
            add_ons=add_ons or AddOns(),
        )
    except ValueError as e:
        logger.error(f"Invalid booking request: {e}")
        return None

    try:
        quote = quote_booking(court, request, reservations)
    except QuickCourtError as e:
        print(f"\nBooking rejected: {e.message}")
        return None

    print_quote(quote)
    persist.save_report([quote])
    return quote


def run_transition(current_status: str, requested_status: str) -> bool:
    allowed = next_valid_status(current_status, requested_status)
    verdict = "allowed" if allowed else "not allowed"
    print(f"Transition {current_status} -> {requested_status} is {verdict}.")
    return allowed


def run_analytics(bookings_file: str, period_days: int = 30) -> BookingAnalytics:
    reservations = persist.load_reservations(bookings_file)
    if reservations is None:
        logger.error("Could not load reservations. Exiting.")
        sys.exit(1)

    logger.info(f"Summarizing {len(reservations)} bookings from {bookings_file}")
    summary = summarize_bookings(reservations, period_days=period_days)
    print_analytics_report(summary)
    return summary
