from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from autodetail.domain.entities.vehicle import VehicleType

DEFAULT_VEHICLE_MULTIPLIER = 1.0


class ServiceCategory(str, Enum):
    exterior = "exterior"
    interior = "interior"
    full_detail = "full-detail"
    specialty = "specialty"


def normalize_multipliers(
    raw: Mapping[str, float] | None,
) -> tuple[dict[VehicleType, float], list[VehicleType]]:
    """
    Build a total vehicle-type -> multiplier table.

    Entries missing from `raw` are filled with 1.0 and returned in the second
    element so callers can report them. Unknown keys are dropped.
    """
    raw = raw or {}
    table: dict[VehicleType, float] = {}
    missing: list[VehicleType] = []
    for vehicle_type in VehicleType:
        value = raw.get(vehicle_type.value)
        if value is None:
            table[vehicle_type] = DEFAULT_VEHICLE_MULTIPLIER
            missing.append(vehicle_type)
        else:
            table[vehicle_type] = float(value)
    return table, missing


@dataclass(frozen=True)
class Service:
    id: str
    name: str
    description: str
    category: ServiceCategory
    base_price: int  # whole currency units
    duration_minutes: int
    is_active: bool = True
    vehicle_type_multipliers: dict[VehicleType, float] = field(default_factory=dict)
    tenant_id: str | None = None
    missing_multipliers: tuple[VehicleType, ...] = field(default=(), compare=False)

    def multiplier_for(self, vehicle_type: VehicleType | str) -> float:
        try:
            key = VehicleType(vehicle_type)
        except ValueError:
            return DEFAULT_VEHICLE_MULTIPLIER
        return self.vehicle_type_multipliers.get(key, DEFAULT_VEHICLE_MULTIPLIER)

    def to_document(self) -> dict[str, Any]:
        return {
            "tenant_id": self.tenant_id,
            "name": self.name,
            "description": self.description,
            "category": self.category.value,
            "base_price": self.base_price,
            "duration_minutes": self.duration_minutes,
            "is_active": self.is_active,
            "vehicle_type_multipliers": {k.value: v for k, v in self.vehicle_type_multipliers.items()},
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Service":
        multipliers, missing = normalize_multipliers(doc.get("vehicle_type_multipliers"))
        return cls(
            id=doc["id"],
            tenant_id=doc.get("tenant_id"),
            name=doc["name"],
            description=doc.get("description", ""),
            category=ServiceCategory(doc["category"]),
            base_price=int(doc["base_price"]),
            duration_minutes=int(doc.get("duration_minutes") or 0),
            is_active=bool(doc.get("is_active", True)),
            vehicle_type_multipliers=multipliers,
            missing_multipliers=tuple(missing),
        )
