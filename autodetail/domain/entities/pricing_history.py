from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from autodetail.domain.entities.timestamps import from_epoch, to_epoch


class TimeOfDay(str, Enum):
    morning = "morning"
    afternoon = "afternoon"
    evening = "evening"


class DemandLevel(str, Enum):
    high = "high"
    medium = "medium"
    low = "low"


@dataclass(frozen=True)
class PricingHistory:
    id: str
    booking_id: str
    service_ids: tuple[str, ...]
    vehicle_type: str  # raw value recorded at booking time
    scheduled_at: datetime
    day_of_week: int  # 0 = Monday
    time_of_day: TimeOfDay
    demand_level: DemandLevel
    base_price: int
    final_price: int
    was_accepted: bool = True
    tenant_id: str | None = None
    weather_condition: str | None = None
    completion_rating: float | None = None

    def to_document(self) -> dict[str, Any]:
        return {
            "booking_id": self.booking_id,
            "tenant_id": self.tenant_id,
            "service_ids": list(self.service_ids),
            "vehicle_type": self.vehicle_type,
            "scheduled_at": to_epoch(self.scheduled_at),
            "day_of_week": self.day_of_week,
            "time_of_day": self.time_of_day.value,
            "demand_level": self.demand_level.value,
            "base_price": self.base_price,
            "final_price": self.final_price,
            "was_accepted": self.was_accepted,
            "weather_condition": self.weather_condition,
            "completion_rating": self.completion_rating,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "PricingHistory":
        return cls(
            id=doc["id"],
            booking_id=doc["booking_id"],
            tenant_id=doc.get("tenant_id"),
            service_ids=tuple(doc.get("service_ids") or ()),
            vehicle_type=str(doc["vehicle_type"]),
            scheduled_at=from_epoch(doc["scheduled_at"]),
            day_of_week=int(doc["day_of_week"]),
            time_of_day=TimeOfDay(doc["time_of_day"]),
            demand_level=DemandLevel(doc["demand_level"]),
            base_price=int(doc["base_price"]),
            final_price=int(doc["final_price"]),
            was_accepted=bool(doc.get("was_accepted", True)),
            weather_condition=doc.get("weather_condition"),
            completion_rating=doc.get("completion_rating"),
        )
