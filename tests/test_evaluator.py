from datetime import date, time
from itertools import product

import pytest

from quickcourt import evaluator
from quickcourt.errors import InvalidTimeFormat, InvalidTimeRange
from quickcourt.models import (
    AddOnCostTable,
    AddOns,
    DaySchedule,
    OperatingSchedule,
    PricingConfig,
    PricingRules,
    RejectionReason,
    Reservation,
    ReservationStatus,
    Tier,
)

WEDNESDAY = date(2025, 1, 1)
SATURDAY = date(2025, 1, 4)
SUNDAY = date(2025, 1, 5)

CONFIG = PricingConfig(coaching_rate_per_hour=500, cleaning_flat_fee=200, peak_start_hour=18, peak_end_hour=22)


def reservation(start, end, status="confirmed", day=WEDNESDAY):
    return Reservation(date=day, start_time=start, end_time=end, status=status)


@pytest.fixture
def schedule():
    return OperatingSchedule(sunday=DaySchedule(closed=True))


def test_parse_time():
    assert evaluator.parse_time("06:30") == time(6, 30)
    assert evaluator.parse_time("23:59") == time(23, 59)


@pytest.mark.parametrize("value", ["6:30", "24:00", "12:60", "1230", "", None])
def test_parse_time_rejects_bad_format(value):
    with pytest.raises(InvalidTimeFormat):
        evaluator.parse_time(value)


def test_duration_hours_keeps_fractions():
    assert evaluator.duration_hours("10:00", "11:30") == 1.5
    assert evaluator.duration_hours("10:15", "10:30") == 0.25


def test_duration_hours_rejects_reversed_range():
    with pytest.raises(InvalidTimeRange):
        evaluator.duration_hours("12:00", "11:00")
    with pytest.raises(InvalidTimeRange):
        evaluator.duration_hours("12:00", "12:00")


@pytest.mark.parametrize(
    "a,b",
    [
        (("10:00", "12:00"), ("11:00", "13:00")),
        (("10:00", "12:00"), ("12:00", "13:00")),
        (("10:00", "12:00"), ("09:00", "10:00")),
        (("10:00", "12:00"), ("10:30", "11:00")),
        (("10:00", "12:00"), ("08:00", "09:00")),
        (("10:00", "12:00"), ("10:00", "12:00")),
    ],
)
def test_overlaps_is_symmetric(a, b):
    assert evaluator.overlaps(*a, *b) == evaluator.overlaps(*b, *a)


def test_overlaps_touching_ranges_do_not_overlap():
    assert evaluator.overlaps("18:00", "20:00", "20:00", "22:00") is False
    assert evaluator.overlaps("18:00", "20:00", "16:00", "18:00") is False
    assert evaluator.overlaps("18:00", "20:00", "19:59", "22:00") is True


def test_is_bookable_free_slot(schedule):
    result = evaluator.is_bookable(schedule, WEDNESDAY, "10:00", "11:00", [])
    assert result.bookable is True
    assert result.reason is None


def test_is_bookable_back_to_back(schedule):
    existing = [reservation("20:00", "22:00"), reservation("16:00", "18:00")]
    result = evaluator.is_bookable(schedule, WEDNESDAY, "18:00", "20:00", existing)
    assert result.bookable is True


def test_is_bookable_conflict(schedule):
    existing = [reservation("08:00", "09:00"), reservation("19:00", "21:00", status="pending")]
    result = evaluator.is_bookable(schedule, WEDNESDAY, "18:00", "20:00", existing)
    assert result.bookable is False
    assert result.reason is RejectionReason.CONFLICT
    assert result.conflicting.start_time == "19:00"


def test_is_bookable_closed_day_short_circuits(schedule):
    """A closed day is rejected even without reservations."""
    result = evaluator.is_bookable(schedule, SUNDAY, "10:00", "11:00", [])
    assert result.bookable is False
    assert result.reason is RejectionReason.CLOSED_DAY

    result = evaluator.is_bookable(schedule, SUNDAY, "10:00", "11:00", [reservation("10:00", "11:00", day=SUNDAY)])
    assert result.reason is RejectionReason.CLOSED_DAY


@pytest.mark.parametrize("status", ["cancelled", "completed", "no-show"])
def test_is_bookable_ignores_non_occupying(schedule, status):
    existing = [reservation("18:00", "20:00", status=status)]
    result = evaluator.is_bookable(schedule, WEDNESDAY, "18:00", "20:00", existing)
    assert result.bookable is True


def test_is_bookable_ignores_other_dates(schedule):
    existing = [reservation("19:00", "21:00", day=date(2025, 1, 2))]
    result = evaluator.is_bookable(schedule, WEDNESDAY, "19:00", "21:00", existing)
    assert result.bookable is True


def test_is_bookable_rejects_invalid_range(schedule):
    with pytest.raises(InvalidTimeRange):
        evaluator.is_bookable(schedule, WEDNESDAY, "20:00", "18:00", [])


def test_weekend_price_beats_peak():
    pricing = PricingRules(base_price=500, peak_hour_price=750, weekend_price=900)
    price = evaluator.compute_price(pricing, SATURDAY, "19:00", "20:00", pricing_config=CONFIG)
    assert price.tier is Tier.WEEKEND
    assert price.unit_price == 900
    assert price.total_amount == 900


def test_weekend_falls_back_to_base_price():
    pricing = PricingRules(base_price=500, peak_hour_price=750)
    price = evaluator.compute_price(pricing, SUNDAY, "19:00", "20:00", pricing_config=CONFIG)
    assert price.tier is Tier.BASE
    assert price.unit_price == 500


def test_peak_window_uses_start_hour_only():
    pricing = PricingRules(base_price=500, peak_hour_price=750)
    # Starts off-peak, runs into the peak window: billed entirely at base
    price = evaluator.compute_price(pricing, WEDNESDAY, "17:00", "19:00", pricing_config=CONFIG)
    assert price.tier is Tier.BASE
    assert price.base_cost == 1000

    # 22:xx is still peak
    price = evaluator.compute_price(pricing, WEDNESDAY, "22:00", "23:00", pricing_config=CONFIG)
    assert price.tier is Tier.PEAK
    assert price.base_cost == 750


def test_peak_without_peak_price_falls_back():
    pricing = PricingRules(base_price=500)
    price = evaluator.compute_price(pricing, WEDNESDAY, "19:00", "20:00", pricing_config=CONFIG)
    assert price.tier is Tier.BASE
    assert price.unit_price == 500


def test_peak_window_follows_config():
    pricing = PricingRules(base_price=500, peak_hour_price=750)
    morning_peak = PricingConfig(peak_start_hour=7, peak_end_hour=9)
    price = evaluator.compute_price(pricing, WEDNESDAY, "08:00", "09:00", pricing_config=morning_peak)
    assert price.tier is Tier.PEAK


def test_flat_and_scaled_add_ons():
    pricing = PricingRules(base_price=100)
    costs = AddOnCostTable(equipment_rental_cost=50, lighting_additional_cost=30)
    add_ons = AddOns(equipment=True, lighting=True, coaching=True, cleaning=True)

    price = evaluator.compute_price(pricing, WEDNESDAY, "09:00", "12:00", add_ons, costs, CONFIG)

    assert price.add_on_costs.cleaning == 200
    assert price.add_on_costs.equipment == 150
    assert price.add_on_costs.lighting == 90
    assert price.add_on_costs.coaching == 1500
    assert price.total_amount == 300 + 200 + 150 + 90 + 1500


def test_add_ons_without_court_rates_cost_nothing():
    pricing = PricingRules(base_price=100)
    add_ons = AddOns(equipment=True, lighting=True)
    price = evaluator.compute_price(pricing, WEDNESDAY, "09:00", "10:00", add_ons, AddOnCostTable(), CONFIG)
    assert price.add_on_costs.total == 0
    assert price.total_amount == 100


def test_unrequested_add_ons_cost_nothing():
    pricing = PricingRules(base_price=100)
    costs = AddOnCostTable(equipment_rental_cost=50)
    price = evaluator.compute_price(pricing, WEDNESDAY, "09:00", "10:00", AddOns(), costs, CONFIG)
    assert price.add_on_costs.equipment == 0


def test_fractional_duration_is_not_rounded():
    pricing = PricingRules(base_price=333)
    price = evaluator.compute_price(pricing, WEDNESDAY, "10:00", "11:30", pricing_config=CONFIG)
    assert price.duration_hours == 1.5
    assert price.base_cost == 333 * 1.5


def test_compute_price_rejects_invalid_range():
    with pytest.raises(InvalidTimeRange):
        evaluator.compute_price(PricingRules(base_price=100), WEDNESDAY, "11:00", "10:00")


ALLOWED = {
    ("pending", "confirmed"),
    ("pending", "cancelled"),
    ("confirmed", "completed"),
    ("confirmed", "cancelled"),
    ("confirmed", "no-show"),
}


@pytest.mark.parametrize("current,requested", list(product([s.value for s in ReservationStatus], repeat=2)))
def test_next_valid_status_matches_table(current, requested):
    assert evaluator.next_valid_status(current, requested) is ((current, requested) in ALLOWED)


def test_next_valid_status_accepts_enums():
    assert evaluator.next_valid_status(ReservationStatus.PENDING, ReservationStatus.CONFIRMED) is True
    assert evaluator.next_valid_status(ReservationStatus.COMPLETED, ReservationStatus.CANCELLED) is False


def test_next_valid_status_unknown_status():
    assert evaluator.next_valid_status("pending", "archived") is False
    assert evaluator.next_valid_status("archived", "pending") is False


def test_weekday_court_end_to_end():
    """Weekday court, closed Sunday, peak evening booking."""
    open_day = DaySchedule(open_time="06:00", close_time="22:00")
    schedule = OperatingSchedule(
        monday=open_day,
        tuesday=open_day,
        wednesday=open_day,
        thursday=open_day,
        friday=open_day,
        sunday=DaySchedule(closed=True),
    )
    pricing = PricingRules(base_price=500, peak_hour_price=750)

    result = evaluator.is_bookable(schedule, WEDNESDAY, "19:00", "21:00", [])
    price = evaluator.compute_price(pricing, WEDNESDAY, "19:00", "21:00", AddOns(), AddOnCostTable(), CONFIG)

    assert result.bookable is True
    assert price.duration_hours == 2
    assert price.unit_price == 750
    assert price.base_cost == 1500
    assert price.total_amount == 1500
