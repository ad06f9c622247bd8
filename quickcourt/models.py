from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from quickcourt import config

# Zero-padded 24-hour HH:MM, so lexical order matches chronological order.
TIME_PATTERN = r"^([01][0-9]|2[0-3]):[0-5][0-9]$"

WEEKDAY_NAMES = ("sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday")


def js_weekday(day: date) -> int:
    """Weekday number with 0=Sunday .. 6=Saturday."""
    return day.isoweekday() % 7


def _coerce_date(value):
    # The API sends dates as full ISO datetimes ("2025-01-01T00:00:00.000Z").
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10:
        return value[:10]
    return value


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class ValueModel(CamelModel):
    model_config = ConfigDict(frozen=True)


class ReservationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no-show"


OCCUPYING_STATUSES = frozenset({ReservationStatus.PENDING, ReservationStatus.CONFIRMED})


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    ONLINE = "online"
    CASH = "cash"
    CARD = "card"
    UPI = "upi"


class Actor(str, Enum):
    USER = "user"
    OWNER = "owner"
    ADMIN = "admin"


class Tier(str, Enum):
    BASE = "base"
    PEAK = "peak"
    WEEKEND = "weekend"


class RejectionReason(str, Enum):
    CLOSED_DAY = "ClosedDay"
    CONFLICT = "Conflict"


# --- Court configuration ---


class DaySchedule(ValueModel):
    open_time: str = Field(
        config.DEFAULT_OPEN_TIME,
        pattern=TIME_PATTERN,
        validation_alias=AliasChoices("open", "openTime", "open_time"),
        serialization_alias="openTime",
    )
    close_time: str = Field(
        config.DEFAULT_CLOSE_TIME,
        pattern=TIME_PATTERN,
        validation_alias=AliasChoices("close", "closeTime", "close_time"),
        serialization_alias="closeTime",
    )
    closed: bool = False

    @model_validator(mode="after")
    def check_hours(self):
        if not self.closed and self.open_time >= self.close_time:
            raise ValueError(f"Opening time {self.open_time} must be before closing time {self.close_time}")
        return self


class OperatingSchedule(ValueModel):
    sunday: DaySchedule = Field(default_factory=DaySchedule)
    monday: DaySchedule = Field(default_factory=DaySchedule)
    tuesday: DaySchedule = Field(default_factory=DaySchedule)
    wednesday: DaySchedule = Field(default_factory=DaySchedule)
    thursday: DaySchedule = Field(default_factory=DaySchedule)
    friday: DaySchedule = Field(default_factory=DaySchedule)
    saturday: DaySchedule = Field(default_factory=DaySchedule)

    def for_date(self, day: date) -> DaySchedule:
        return getattr(self, WEEKDAY_NAMES[js_weekday(day)])


class PricingRules(ValueModel):
    base_price: float = Field(ge=0)
    peak_hour_price: Optional[float] = Field(None, ge=0)
    weekend_price: Optional[float] = Field(None, ge=0)
    currency: str = config.DEFAULT_CURRENCY


class AddOnCostTable(ValueModel):
    equipment_rental_cost: Optional[float] = Field(None, ge=0)
    lighting_additional_cost: Optional[float] = Field(None, ge=0)


class PricingConfig(ValueModel):
    """Platform-wide pricing constants, tunable per deployment."""

    coaching_rate_per_hour: float = Field(config.COACHING_RATE_PER_HOUR, ge=0)
    cleaning_flat_fee: float = Field(config.CLEANING_FLAT_FEE, ge=0)
    peak_start_hour: int = Field(config.PEAK_START_HOUR, ge=0, le=23)
    peak_end_hour: int = Field(config.PEAK_END_HOUR, ge=0, le=23)


class EquipmentInfo(ValueModel):
    provided: bool = False
    items: List[str] = Field(default_factory=list)
    rental_cost: Optional[float] = Field(None, ge=0)


class LightingInfo(ValueModel):
    available: bool = False
    type: Optional[str] = None
    additional_cost: Optional[float] = Field(None, ge=0)


class CourtAvailabilityFlags(ValueModel):
    is_available: bool = True
    maintenance_mode: bool = False
    maintenance_reason: Optional[str] = None


class Court(ValueModel):
    id: Optional[str] = Field(None, validation_alias=AliasChoices("_id", "id"), serialization_alias="id")
    name: str = ""
    sport_type: Optional[str] = None
    pricing: PricingRules
    operating_hours: OperatingSchedule = Field(default_factory=OperatingSchedule)
    equipment: EquipmentInfo = Field(default_factory=EquipmentInfo)
    lighting: LightingInfo = Field(default_factory=LightingInfo)
    availability: CourtAvailabilityFlags = Field(default_factory=CourtAvailabilityFlags)

    @property
    def add_on_costs(self) -> AddOnCostTable:
        return AddOnCostTable(
            equipment_rental_cost=self.equipment.rental_cost,
            lighting_additional_cost=self.lighting.additional_cost,
        )

    @property
    def accepts_bookings(self) -> bool:
        return self.availability.is_available and not self.availability.maintenance_mode


# --- Reservations ---


class AddOns(ValueModel):
    equipment: bool = False
    lighting: bool = False
    coaching: bool = False
    cleaning: bool = False


class AddOnCosts(ValueModel):
    equipment: float = 0.0
    lighting: float = 0.0
    coaching: float = 0.0
    cleaning: float = 0.0

    @property
    def total(self) -> float:
        return self.equipment + self.lighting + self.coaching + self.cleaning


class TimeRange(ValueModel):
    start_time: str = Field(pattern=TIME_PATTERN)
    end_time: str = Field(pattern=TIME_PATTERN)


class Reservation(ValueModel):
    id: Optional[str] = Field(None, validation_alias=AliasChoices("_id", "id"), serialization_alias="id")
    court_id: Optional[str] = Field(
        None, validation_alias=AliasChoices("court", "courtId", "court_id"), serialization_alias="courtId"
    )
    date: date
    start_time: str = Field(pattern=TIME_PATTERN)
    end_time: str = Field(pattern=TIME_PATTERN)
    status: ReservationStatus = ReservationStatus.PENDING
    duration: Optional[float] = None
    total_amount: Optional[float] = None
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_method: Optional[PaymentMethod] = None
    transaction_id: Optional[str] = None
    payment_date: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    cancelled_by: Optional[Actor] = None
    cancellation_date: Optional[datetime] = None
    additional_services: Optional[AddOns] = None
    additional_costs: Optional[AddOnCosts] = None
    players: int = Field(1, ge=1)
    sport_type: Optional[str] = None
    created_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def copy_sport_type(cls, data):
        # Keep the sport of a populated court before it is reduced to its id.
        if isinstance(data, dict) and isinstance(data.get("court"), dict) and not data.get("sportType"):
            sport_type = data["court"].get("sportType")
            if sport_type:
                data = {**data, "sportType": sport_type}
        return data

    @field_validator("date", mode="before")
    @classmethod
    def truncate_date(cls, value):
        return _coerce_date(value)

    @field_validator("players", mode="before")
    @classmethod
    def unwrap_players(cls, value):
        if isinstance(value, dict):
            return value.get("count", 1)
        return value

    @field_validator("court_id", mode="before")
    @classmethod
    def unwrap_court(cls, value):
        # Populated responses embed the court document instead of its id.
        if isinstance(value, dict):
            return value.get("_id") or value.get("id")
        return value

    @property
    def is_occupying(self) -> bool:
        return self.status in OCCUPYING_STATUSES

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start_time=self.start_time, end_time=self.end_time)


class ReservationRequest(ValueModel):
    court_id: Optional[str] = Field(
        None, validation_alias=AliasChoices("courtId", "court", "court_id"), serialization_alias="courtId"
    )
    date: date
    start_time: str = Field(pattern=TIME_PATTERN)
    end_time: str = Field(pattern=TIME_PATTERN)
    add_ons: AddOns = Field(
        default_factory=AddOns,
        validation_alias=AliasChoices("addOns", "additionalServices", "add_ons"),
        serialization_alias="addOns",
    )
    players: int = Field(1, ge=1)

    @field_validator("date", mode="before")
    @classmethod
    def truncate_date(cls, value):
        return _coerce_date(value)

    @field_validator("players", mode="before")
    @classmethod
    def unwrap_players(cls, value):
        if isinstance(value, dict):
            return value.get("count", 1)
        return value


# --- Evaluation results ---


class BookableResult(ValueModel):
    bookable: bool
    reason: Optional[RejectionReason] = None
    conflicting: Optional[Reservation] = None


class PriceBreakdown(ValueModel):
    tier: Tier
    unit_price: float
    duration_hours: float
    base_cost: float
    add_on_costs: AddOnCosts
    total_amount: float
    currency: str = config.DEFAULT_CURRENCY


class TimeSlot(TimeRange):
    available: bool


class DayAvailability(ValueModel):
    court_id: Optional[str] = None
    court_name: str = ""
    date: date
    available: bool
    message: Optional[str] = None
    open_time: Optional[str] = None
    close_time: Optional[str] = None
    slots: List[TimeSlot] = Field(default_factory=list)
    existing_bookings: List[TimeRange] = Field(default_factory=list)


class BookingQuote(ValueModel):
    court_id: Optional[str] = None
    request: ReservationRequest
    price: PriceBreakdown
    reservation: Reservation


class BookingAnalytics(ValueModel):
    total_bookings: int
    total_revenue: float
    average_booking_value: float
    completed_bookings: int
    cancelled_bookings: int
    pending_bookings: int
    confirmed_bookings: int
    no_show_bookings: int
    paid_bookings: int
    pending_payments: int
    failed_payments: int
    daily_stats: Dict[str, int]
    hour_stats: Dict[int, int]
    recent_bookings: List[Reservation]
    sport_type_stats: Dict[str, int]
    period: int
