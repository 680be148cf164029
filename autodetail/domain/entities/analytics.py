from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from autodetail.domain.entities.timestamps import from_epoch, to_epoch


@dataclass(frozen=True)
class VehicleTypePricing:
    vehicle_type: str
    count: int
    avg_price: float


@dataclass(frozen=True)
class PricingAnalytics:
    total_bookings: int
    accepted_bookings: int
    acceptance_rate: float
    avg_base_price: float
    avg_final_price: float
    price_by_vehicle_type: list[VehicleTypePricing] = field(default_factory=list)


@dataclass(frozen=True)
class TenantStats:
    total_assessments: int
    total_bookings: int
    total_clients: int
    completed_bookings: int
    total_revenue: int
    conversion_rate: float


@dataclass(frozen=True)
class DailyMetric:
    id: str
    date: datetime
    metric: str
    value: float
    tenant_id: str | None = None
    metadata: dict[str, Any] | None = None

    def to_document(self) -> dict[str, Any]:
        return {
            "tenant_id": self.tenant_id,
            "date": to_epoch(self.date),
            "metric": self.metric,
            "value": self.value,
            "metadata": self.metadata,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "DailyMetric":
        return cls(
            id=doc["id"],
            tenant_id=doc.get("tenant_id"),
            date=from_epoch(doc["date"]),
            metric=doc["metric"],
            value=float(doc["value"]),
            metadata=doc.get("metadata"),
        )
