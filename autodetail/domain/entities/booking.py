from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from autodetail.domain.entities.timestamps import from_epoch, to_epoch


class BookingStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    in_progress = "in-progress"
    completed = "completed"
    cancelled = "cancelled"


@dataclass(frozen=True)
class Location:
    address: str
    city: str
    state: str
    zip_code: str

    def to_document(self) -> dict[str, Any]:
        return {"address": self.address, "city": self.city, "state": self.state, "zip_code": self.zip_code}

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Location":
        return cls(address=doc["address"], city=doc["city"], state=doc["state"], zip_code=doc["zip_code"])


@dataclass(frozen=True)
class PricingFactors:
    """Pricing snapshot agreed with the customer. Never changes after the booking is created."""

    base_price: int
    vehicle_multiplier: float
    demand_multiplier: float
    seasonal_multiplier: float
    loyalty_discount: float
    final_price: int

    def to_document(self) -> dict[str, Any]:
        return {
            "base_price": self.base_price,
            "vehicle_multiplier": self.vehicle_multiplier,
            "demand_multiplier": self.demand_multiplier,
            "seasonal_multiplier": self.seasonal_multiplier,
            "loyalty_discount": self.loyalty_discount,
            "final_price": self.final_price,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "PricingFactors":
        return cls(
            base_price=int(doc["base_price"]),
            vehicle_multiplier=float(doc["vehicle_multiplier"]),
            demand_multiplier=float(doc["demand_multiplier"]),
            seasonal_multiplier=float(doc["seasonal_multiplier"]),
            loyalty_discount=float(doc["loyalty_discount"]),
            final_price=int(doc["final_price"]),
        )


@dataclass(frozen=True)
class Booking:
    id: str
    user_id: str | None
    vehicle_id: str | None
    service_ids: tuple[str, ...]
    scheduled_at: datetime
    status: BookingStatus
    total_price: int
    pricing_factors: PricingFactors
    location: Location
    notes: str | None = None
    completed_at: datetime | None = None
    assigned_detailer_id: str | None = None
    tenant_id: str | None = None
    client_id: str | None = None  # set for bookings converted from a self-assessment
    source_assessment_id: str | None = None
    created_at: datetime | None = None

    def to_document(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "tenant_id": self.tenant_id,
            "client_id": self.client_id,
            "vehicle_id": self.vehicle_id,
            "service_ids": list(self.service_ids),
            "scheduled_at": to_epoch(self.scheduled_at),
            "status": self.status.value,
            "total_price": self.total_price,
            "pricing_factors": self.pricing_factors.to_document(),
            "location": self.location.to_document(),
            "notes": self.notes,
            "completed_at": to_epoch(self.completed_at),
            "assigned_detailer_id": self.assigned_detailer_id,
            "source_assessment_id": self.source_assessment_id,
            "created_at": to_epoch(self.created_at),
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Booking":
        return cls(
            id=doc["id"],
            user_id=doc.get("user_id"),
            tenant_id=doc.get("tenant_id"),
            client_id=doc.get("client_id"),
            vehicle_id=doc.get("vehicle_id"),
            service_ids=tuple(doc.get("service_ids") or ()),
            scheduled_at=from_epoch(doc["scheduled_at"]),
            status=BookingStatus(doc["status"]),
            total_price=int(doc["total_price"]),
            pricing_factors=PricingFactors.from_document(doc["pricing_factors"]),
            location=Location.from_document(doc["location"]),
            notes=doc.get("notes"),
            completed_at=from_epoch(doc.get("completed_at")),
            assigned_detailer_id=doc.get("assigned_detailer_id"),
            source_assessment_id=doc.get("source_assessment_id"),
            created_at=from_epoch(doc.get("created_at")),
        )
