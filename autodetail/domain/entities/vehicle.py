from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class VehicleType(str, Enum):
    sedan = "sedan"
    suv = "suv"
    truck = "truck"
    van = "van"
    coupe = "coupe"
    luxury = "luxury"


@dataclass(frozen=True)
class Vehicle:
    id: str
    user_id: str
    make: str
    model: str
    year: int
    color: str
    vehicle_type: VehicleType
    license_plate: str | None = None
    notes: str | None = None
    tenant_id: str | None = None

    def to_document(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "tenant_id": self.tenant_id,
            "make": self.make,
            "model": self.model,
            "year": self.year,
            "color": self.color,
            "vehicle_type": self.vehicle_type.value,
            "license_plate": self.license_plate,
            "notes": self.notes,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Vehicle":
        return cls(
            id=doc["id"],
            user_id=doc["user_id"],
            tenant_id=doc.get("tenant_id"),
            make=doc["make"],
            model=doc["model"],
            year=int(doc["year"]),
            color=doc["color"],
            vehicle_type=VehicleType(doc["vehicle_type"]),
            license_plate=doc.get("license_plate"),
            notes=doc.get("notes"),
        )
