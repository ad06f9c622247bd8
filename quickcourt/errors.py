from http import HTTPStatus


class QuickCourtError(Exception):
    """Base class for booking failures that a request handler turns into an HTTP error."""

    status_code = HTTPStatus.BAD_REQUEST
    detail = "Booking error"

    def __init__(self, message: str | None = None):
        self.message = message or self.detail
        super().__init__(self.message)


class InvalidTimeFormat(QuickCourtError, ValueError):
    detail = "Time must be in HH:MM format"


class InvalidTimeRange(QuickCourtError, ValueError):
    detail = "End time must be after start time"


class InvalidTransition(QuickCourtError):
    detail = "Invalid status transition"

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Invalid status transition from {current} to {requested}")


class BookingRejected(QuickCourtError):
    """The requested slot cannot be booked; `reason` says why."""

    detail = "Time slot is not available"

    def __init__(self, reason, message: str | None = None):
        self.reason = reason
        super().__init__(message)


class CourtUnavailable(QuickCourtError):
    detail = "Court is not available for booking"


class CancellationWindowClosed(QuickCourtError):
    detail = "Bookings cannot be cancelled this close to the start time"
