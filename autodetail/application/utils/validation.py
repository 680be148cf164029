"""Input validation. Each validator collects every problem and raises once."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any

from autodetail.application.exceptions import ValidationError
from autodetail.domain.entities.service import ServiceCategory
from autodetail.domain.entities.vehicle import VehicleType

ZIP_CODE_PATTERN = re.compile(r"^\d{5}(-\d{4})?$")
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

MIN_SERVICE_MINUTES = 15
MAX_SERVICE_MINUTES = 480
MIN_VEHICLE_YEAR = 1900


def _too_short(value: str | None, length: int) -> bool:
    return not value or len(value.strip()) < length


def _raise_if(errors: dict[str, str]) -> None:
    if errors:
        raise ValidationError(errors)


def validate_vehicle_fields(fields: dict[str, Any], now: datetime, partial: bool = False) -> None:
    """Validate vehicle attributes. With `partial`, only the keys present are checked."""
    errors: dict[str, str] = {}

    def present(key: str) -> bool:
        return not partial or key in fields

    if present("make") and _too_short(fields.get("make"), 2):
        errors["make"] = "Make must be at least 2 characters"
    if present("model") and _too_short(fields.get("model"), 1):
        errors["model"] = "Model is required"
    if present("year"):
        year = fields.get("year")
        if not isinstance(year, int) or year < MIN_VEHICLE_YEAR or year > now.year + 1:
            errors["year"] = f"Year must be between {MIN_VEHICLE_YEAR} and {now.year + 1}"
    if present("color") and _too_short(fields.get("color"), 2):
        errors["color"] = "Color must be at least 2 characters"
    if present("vehicle_type"):
        try:
            VehicleType(fields.get("vehicle_type"))
        except ValueError:
            errors["vehicle_type"] = "Vehicle type is required"
    _raise_if(errors)


def validate_service_fields(fields: dict[str, Any], partial: bool = False) -> None:
    errors: dict[str, str] = {}

    def present(key: str) -> bool:
        return not partial or key in fields

    if present("name") and _too_short(fields.get("name"), 3):
        errors["name"] = "Service name must be at least 3 characters"
    if present("description") and _too_short(fields.get("description"), 10):
        errors["description"] = "Description must be at least 10 characters"
    if present("category"):
        try:
            ServiceCategory(fields.get("category"))
        except ValueError:
            errors["category"] = "Unknown service category"
    if present("base_price"):
        price = fields.get("base_price")
        if not isinstance(price, int) or isinstance(price, bool) or price <= 0:
            errors["base_price"] = "Base price must be a whole amount greater than 0"
    if present("duration_minutes"):
        duration = fields.get("duration_minutes")
        if not isinstance(duration, int) or not MIN_SERVICE_MINUTES <= duration <= MAX_SERVICE_MINUTES:
            errors["duration_minutes"] = (
                f"Duration must be between {MIN_SERVICE_MINUTES} and {MAX_SERVICE_MINUTES} minutes"
            )
    multipliers = fields.get("vehicle_type_multipliers")
    if multipliers:
        for key, value in dict(multipliers).items():
            try:
                VehicleType(key)
            except ValueError:
                errors[f"vehicle_type_multipliers.{key}"] = "Unknown vehicle type"
                continue
            if value is None or float(value) <= 0:
                errors[f"vehicle_type_multipliers.{key}"] = "Multiplier must be greater than 0"
    _raise_if(errors)


def location_errors(location: dict[str, Any]) -> dict[str, str]:
    errors: dict[str, str] = {}
    if _too_short(location.get("address"), 5):
        errors["address"] = "Address must be at least 5 characters"
    if _too_short(location.get("city"), 2):
        errors["city"] = "City is required"
    if _too_short(location.get("state"), 2):
        errors["state"] = "State is required"
    if not ZIP_CODE_PATTERN.match(location.get("zip_code") or ""):
        errors["zip_code"] = "Valid ZIP code is required"
    return errors


def validate_booking_request(
    vehicle_id: str | None,
    service_ids: list[str],
    scheduled_at: datetime | None,
    location: dict[str, Any],
    now: datetime,
    require_vehicle: bool = True,
) -> None:
    errors: dict[str, str] = {}
    if require_vehicle and not vehicle_id:
        errors["vehicle"] = "Please select a vehicle"
    if not service_ids:
        errors["services"] = "Please select at least one service"
    if scheduled_at is None:
        errors["date"] = "Please select a date and time"
    elif scheduled_at <= now:
        errors["date"] = "Scheduled date must be in the future"
    errors.update(location_errors(location))
    _raise_if(errors)


def validate_contact(email: str | None, name: str | None, phone: str | None = None) -> None:
    errors: dict[str, str] = {}
    if not email or not EMAIL_PATTERN.match(email.strip()):
        errors["email"] = "Invalid email format"
    if _too_short(name, 2):
        errors["name"] = "Name must be at least 2 characters"
    if phone is not None and len(re.sub(r"\D", "", phone)) < 10:
        errors["phone"] = "Phone number must have at least 10 digits"
    _raise_if(errors)


def validate_slug(slug: str) -> None:
    if not SLUG_PATTERN.match(slug or ""):
        raise ValidationError({"slug": "Slug may contain lowercase letters, digits and single dashes"})


def validate_profile(name: str | None, phone: str | None) -> None:
    errors: dict[str, str] = {}
    if name is not None and _too_short(name, 2):
        errors["name"] = "Name must be at least 2 characters"
    if phone is not None and len(re.sub(r"\D", "", phone)) < 10:
        errors["phone"] = "Phone number must have at least 10 digits"
    _raise_if(errors)
