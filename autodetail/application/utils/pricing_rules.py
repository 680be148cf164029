"""
Calendar and loyalty rules for the dynamic pricing calculator.

All functions are pure: the same inputs always give the same multipliers.
Weekdays follow `datetime.weekday()` (Monday = 0, Sunday = 6) and months are
1-based.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from zoneinfo import ZoneInfo

from autodetail.domain.entities.pricing_history import DemandLevel, TimeOfDay

FRIDAY = 4
SATURDAY = 5
SUNDAY = 6

PEAK_SEASON_MONTHS = range(4, 10)  # April through September


@dataclass(frozen=True)
class CalendarFeatures:
    day_of_week: int
    hour: int
    month: int

    @property
    def is_weekend(self) -> bool:
        return self.day_of_week in (SATURDAY, SUNDAY)

    @property
    def is_peak_season(self) -> bool:
        return self.month in PEAK_SEASON_MONTHS


def calendar_features(scheduled_at: datetime, timezone: ZoneInfo) -> CalendarFeatures:
    local = scheduled_at.astimezone(timezone) if scheduled_at.tzinfo else scheduled_at.replace(tzinfo=timezone)
    return CalendarFeatures(day_of_week=local.weekday(), hour=local.hour, month=local.month)


def demand_multiplier(day_of_week: int) -> float:
    if day_of_week in (SATURDAY, SUNDAY):
        return 1.15
    if day_of_week == FRIDAY:
        return 1.10
    return 0.95


def seasonal_multiplier(month: int) -> float:
    return 1.20 if month in PEAK_SEASON_MONTHS else 0.90


def time_of_day_multiplier(hour: int) -> float:
    if 14 <= hour <= 17:
        return 1.10
    if 8 <= hour <= 11:
        return 0.90
    return 1.00


def loyalty_discount(completed_bookings: int) -> float:
    if completed_bookings >= 5:
        return 0.10
    if completed_bookings >= 3:
        return 0.05
    return 0.0


def time_of_day_bucket(hour: int) -> TimeOfDay:
    if hour < 12:
        return TimeOfDay.morning
    if hour < 17:
        return TimeOfDay.afternoon
    return TimeOfDay.evening


def demand_level(multiplier: float) -> DemandLevel:
    if multiplier > 1.1:
        return DemandLevel.high
    if multiplier < 1:
        return DemandLevel.low
    return DemandLevel.medium


def context_query(vehicle_type: str, features: CalendarFeatures) -> str:
    """Natural-language description of a quote used to retrieve pricing knowledge."""
    day = "weekend" if features.is_weekend else "weekday"
    slot = time_of_day_bucket(features.hour).value
    season = "peak season" if features.is_peak_season else "off-season"
    return f"Pricing factors for {vehicle_type} vehicle, scheduled for {day}, {slot} slot, in {season}."
