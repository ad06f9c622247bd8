import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from quickcourt.models import BookingAnalytics, PaymentStatus, Reservation, ReservationStatus

logger = logging.getLogger(__name__)

RECENT_LIMIT = 5


def _as_utc(moment: datetime) -> datetime:
    # Naive values are local wall-clock time.
    return moment.astimezone(timezone.utc)


def _in_period(reservation: Reservation, since: datetime) -> bool:
    if reservation.created_at is None:
        return True
    return _as_utc(reservation.created_at) >= _as_utc(since)


def summarize_bookings(
    reservations: Iterable[Reservation], period_days: int = 30, now: Optional[datetime] = None
) -> BookingAnalytics:
    """Aggregates booking counts, revenue and time distribution over the last period_days."""
    now = now or datetime.now()
    since = now - timedelta(days=period_days)
    bookings = [r for r in reservations if _in_period(r, since)]

    total = len(bookings)
    revenue = sum(r.total_amount or 0.0 for r in bookings)
    statuses = Counter(r.status for r in bookings)
    payments = Counter(r.payment_status for r in bookings)

    daily_stats = Counter(r.date.isoformat() for r in bookings)
    hour_stats = Counter(int(r.start_time.split(":")[0]) for r in bookings)
    sport_type_stats = Counter(r.sport_type for r in bookings if r.sport_type)

    recent = sorted(
        (r for r in bookings if r.created_at is not None),
        key=lambda r: r.created_at.timestamp(),
        reverse=True,
    )[:RECENT_LIMIT]

    logger.debug(f"Summarized {total} of the bookings created since {since.isoformat()}")

    return BookingAnalytics(
        total_bookings=total,
        total_revenue=revenue,
        average_booking_value=round(revenue / total, 2) if total else 0.0,
        completed_bookings=statuses[ReservationStatus.COMPLETED],
        cancelled_bookings=statuses[ReservationStatus.CANCELLED],
        pending_bookings=statuses[ReservationStatus.PENDING],
        confirmed_bookings=statuses[ReservationStatus.CONFIRMED],
        no_show_bookings=statuses[ReservationStatus.NO_SHOW],
        paid_bookings=payments[PaymentStatus.PAID],
        pending_payments=payments[PaymentStatus.PENDING],
        failed_payments=payments[PaymentStatus.FAILED],
        daily_stats=dict(daily_stats),
        hour_stats=dict(hour_stats),
        recent_bookings=recent,
        sport_type_stats=dict(sport_type_stats),
        period=period_days,
    )
