"""Booking workflow: quoting requests and applying status and payment changes.

These functions play the part of the reservation request handlers. Loading the
court and its reservations, and persisting the returned records, is up to the
caller. The check and the write are not atomic, so two concurrent callers can
still book the same slot.
"""

import logging
from datetime import date, datetime
from typing import Iterable, Optional

from quickcourt import config
from quickcourt.errors import (
    BookingRejected,
    CancellationWindowClosed,
    CourtUnavailable,
    InvalidTimeRange,
    InvalidTransition,
)
from quickcourt.evaluator import compute_price, duration_hours, is_bookable, next_valid_status, parse_time
from quickcourt.models import (
    Actor,
    BookingQuote,
    Court,
    PaymentMethod,
    PaymentStatus,
    PricingConfig,
    RejectionReason,
    Reservation,
    ReservationRequest,
    ReservationStatus,
)

logger = logging.getLogger(__name__)

REJECTION_MESSAGES = {
    RejectionReason.CLOSED_DAY: "Court is closed on this day",
    RejectionReason.CONFLICT: "Time slot is already booked",
}


def quote_booking(
    court: Court,
    request: ReservationRequest,
    reservations: Iterable[Reservation],
    pricing_config: Optional[PricingConfig] = None,
) -> BookingQuote:
    """Validates a reservation request against the court and prices it.

    Returns a quote holding the price breakdown and the pending reservation record
    that should be stored.

    Raises:
        CourtUnavailable: the court is switched off or in maintenance.
        InvalidTimeRange: the range is empty, reversed or shorter than the minimum.
        BookingRejected: the court is closed that day or the slot is taken.
    """
    if not court.accepts_bookings:
        message = CourtUnavailable.detail
        if court.availability.maintenance_mode and court.availability.maintenance_reason:
            message = f"{message}: {court.availability.maintenance_reason}"
        raise CourtUnavailable(message)

    hours = duration_hours(request.start_time, request.end_time)
    if hours < config.MIN_BOOKING_HOURS:
        raise InvalidTimeRange(f"Duration must be at least {config.MIN_BOOKING_HOURS} hours")

    same_day = [r for r in reservations if r.date == request.date]
    result = is_bookable(court.operating_hours, request.date, request.start_time, request.end_time, same_day)
    if not result.bookable:
        logger.info(
            f"Rejected {request.date.isoformat()} {request.start_time}-{request.end_time} "
            f"on {court.name or court.id}: {result.reason.value}"
        )
        raise BookingRejected(result.reason, REJECTION_MESSAGES[result.reason])

    price = compute_price(
        court.pricing,
        request.date,
        request.start_time,
        request.end_time,
        request.add_ons,
        court.add_on_costs,
        pricing_config,
    )

    reservation = Reservation(
        court_id=court.id or request.court_id,
        date=request.date,
        start_time=request.start_time,
        end_time=request.end_time,
        status=ReservationStatus.PENDING,
        duration=price.duration_hours,
        total_amount=price.total_amount,
        payment_status=PaymentStatus.PENDING,
        additional_services=request.add_ons,
        additional_costs=price.add_on_costs,
        players=request.players,
        sport_type=court.sport_type,
    )

    logger.info(
        f"Quoted {request.date.isoformat()} {request.start_time}-{request.end_time} "
        f"at {price.total_amount} {price.currency} ({price.tier.value} tier)"
    )
    return BookingQuote(court_id=reservation.court_id, request=request, price=price, reservation=reservation)


def change_status(
    reservation: Reservation,
    requested_status,
    actor=Actor.USER,
    now: Optional[datetime] = None,
    reason: Optional[str] = None,
) -> Reservation:
    """Returns a copy of the reservation moved to requested_status.

    Cancelling records who cancelled and when, and turns a paid payment into a refund.
    """
    if not next_valid_status(reservation.status, requested_status):
        raise InvalidTransition(reservation.status.value, getattr(requested_status, "value", str(requested_status)))

    status = ReservationStatus(requested_status)
    update = {"status": status}

    if status is ReservationStatus.CANCELLED:
        update["cancellation_reason"] = reason
        update["cancelled_by"] = Actor(actor)
        update["cancellation_date"] = now or datetime.now()
        if reservation.payment_status is PaymentStatus.PAID:
            update["payment_status"] = PaymentStatus.REFUNDED

    logger.debug(f"Reservation {reservation.id}: {reservation.status.value} -> {status.value}")
    return reservation.model_copy(update=update)


def _starts_at(reservation: Reservation) -> datetime:
    return datetime.combine(reservation.date, parse_time(reservation.start_time))


def _ends_at(reservation: Reservation) -> datetime:
    return datetime.combine(reservation.date, parse_time(reservation.end_time))


def hours_until_start(reservation: Reservation, now: datetime) -> float:
    return (_starts_at(reservation) - now).total_seconds() / 3600


def is_past(reservation: Reservation, now: Optional[datetime] = None) -> bool:
    """True once the reservation has ended."""
    return _ends_at(reservation) < (now or datetime.now())


def is_upcoming(reservation: Reservation, now: Optional[datetime] = None) -> bool:
    return _starts_at(reservation) > (now or datetime.now())


def is_today(reservation: Reservation, today: Optional[date] = None) -> bool:
    return reservation.date == (today or date.today())


def cancel_reservation(
    reservation: Reservation,
    actor=Actor.USER,
    now: Optional[datetime] = None,
    reason: Optional[str] = None,
    cutoff_hours: Optional[float] = None,
) -> Reservation:
    """Cancels an active reservation unless its start is closer than the cut-off.

    Times are naive local wall-clock values, like the reservation's own date and times.
    """
    now = now or datetime.now()
    cutoff_hours = config.CANCELLATION_CUTOFF_HOURS if cutoff_hours is None else cutoff_hours

    if not reservation.is_occupying:
        raise InvalidTransition(reservation.status.value, ReservationStatus.CANCELLED.value)

    if hours_until_start(reservation, now) < cutoff_hours:
        raise CancellationWindowClosed(
            f"Bookings cannot be cancelled within {cutoff_hours:g} hours of start time"
        )

    return change_status(reservation, ReservationStatus.CANCELLED, actor=actor, now=now, reason=reason)


def record_payment(
    reservation: Reservation,
    payment_status,
    now: Optional[datetime] = None,
    transaction_id: Optional[str] = None,
    payment_method=None,
) -> Reservation:
    """Applies a payment update. A paid pending reservation is confirmed automatically."""
    status = PaymentStatus(payment_status)
    update = {"payment_status": status}

    if transaction_id:
        update["transaction_id"] = transaction_id
    if payment_method:
        update["payment_method"] = PaymentMethod(payment_method)

    if status is PaymentStatus.PAID:
        update["payment_date"] = now or datetime.now()
        if reservation.status is ReservationStatus.PENDING:
            update["status"] = ReservationStatus.CONFIRMED

    return reservation.model_copy(update=update)
