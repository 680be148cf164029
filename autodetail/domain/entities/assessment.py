from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from autodetail.domain.entities.timestamps import from_epoch, to_epoch
from autodetail.domain.entities.vehicle import VehicleType


class ConditionGrade(str, Enum):
    excellent = "excellent"
    good = "good"
    fair = "fair"
    poor = "poor"


class AssessmentStatus(str, Enum):
    draft = "draft"
    submitted = "submitted"
    reviewed = "reviewed"
    approved = "approved"
    converted = "converted"


@dataclass(frozen=True)
class ExteriorCondition:
    paint: ConditionGrade = ConditionGrade.good
    scratches: bool = False
    dents: bool = False
    rust: bool = False
    notes: str | None = None


@dataclass(frozen=True)
class InteriorCondition:
    seats: ConditionGrade = ConditionGrade.good
    carpet: ConditionGrade = ConditionGrade.good
    dashboard: ConditionGrade = ConditionGrade.good
    stains: bool = False
    odors: bool = False
    pet_hair: bool = False
    notes: str | None = None


@dataclass(frozen=True)
class OverallCondition:
    mileage: int = 0
    smoking_vehicle: bool = False
    last_detail_date: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class ConditionAssessment:
    exterior: ExteriorCondition = field(default_factory=ExteriorCondition)
    interior: InteriorCondition = field(default_factory=InteriorCondition)
    overall: OverallCondition = field(default_factory=OverallCondition)

    def to_document(self) -> dict[str, Any]:
        return {
            "exterior": {
                "paint": self.exterior.paint.value,
                "scratches": self.exterior.scratches,
                "dents": self.exterior.dents,
                "rust": self.exterior.rust,
                "notes": self.exterior.notes,
            },
            "interior": {
                "seats": self.interior.seats.value,
                "carpet": self.interior.carpet.value,
                "dashboard": self.interior.dashboard.value,
                "stains": self.interior.stains,
                "odors": self.interior.odors,
                "pet_hair": self.interior.pet_hair,
                "notes": self.interior.notes,
            },
            "overall": {
                "mileage": self.overall.mileage,
                "smoking_vehicle": self.overall.smoking_vehicle,
                "last_detail_date": self.overall.last_detail_date,
                "notes": self.overall.notes,
            },
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "ConditionAssessment":
        ext = doc.get("exterior") or {}
        inner = doc.get("interior") or {}
        overall = doc.get("overall") or {}
        return cls(
            exterior=ExteriorCondition(
                paint=ConditionGrade(ext.get("paint", "good")),
                scratches=bool(ext.get("scratches", False)),
                dents=bool(ext.get("dents", False)),
                rust=bool(ext.get("rust", False)),
                notes=ext.get("notes"),
            ),
            interior=InteriorCondition(
                seats=ConditionGrade(inner.get("seats", "good")),
                carpet=ConditionGrade(inner.get("carpet", "good")),
                dashboard=ConditionGrade(inner.get("dashboard", "good")),
                stains=bool(inner.get("stains", False)),
                odors=bool(inner.get("odors", False)),
                pet_hair=bool(inner.get("pet_hair", False)),
                notes=inner.get("notes"),
            ),
            overall=OverallCondition(
                mileage=int(overall.get("mileage", 0)),
                smoking_vehicle=bool(overall.get("smoking_vehicle", False)),
                last_detail_date=overall.get("last_detail_date"),
                notes=overall.get("notes"),
            ),
        )


@dataclass(frozen=True)
class VehicleInfo:
    make: str
    model: str
    year: int
    color: str
    vehicle_type: VehicleType
    vin: str | None = None

    def to_document(self) -> dict[str, Any]:
        return {
            "vin": self.vin,
            "make": self.make,
            "model": self.model,
            "year": self.year,
            "color": self.color,
            "vehicle_type": self.vehicle_type.value,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "VehicleInfo":
        return cls(
            vin=doc.get("vin"),
            make=doc["make"],
            model=doc["model"],
            year=int(doc["year"]),
            color=doc["color"],
            vehicle_type=VehicleType(doc["vehicle_type"]),
        )


@dataclass(frozen=True)
class AssessmentPricingFactors:
    base_price: int = 0
    vehicle_multiplier: float = 1.0
    condition_multiplier: float = 1.0
    demand_multiplier: float = 1.0
    final_price: int = 0

    def to_document(self) -> dict[str, Any]:
        return {
            "base_price": self.base_price,
            "vehicle_multiplier": self.vehicle_multiplier,
            "condition_multiplier": self.condition_multiplier,
            "demand_multiplier": self.demand_multiplier,
            "final_price": self.final_price,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "AssessmentPricingFactors":
        return cls(
            base_price=int(doc.get("base_price", 0)),
            vehicle_multiplier=float(doc.get("vehicle_multiplier", 1.0)),
            condition_multiplier=float(doc.get("condition_multiplier", 1.0)),
            demand_multiplier=float(doc.get("demand_multiplier", 1.0)),
            final_price=int(doc.get("final_price", 0)),
        )


@dataclass(frozen=True)
class Assessment:
    id: str
    tenant_id: str
    client_id: str
    vehicle_info: VehicleInfo
    condition: ConditionAssessment = field(default_factory=ConditionAssessment)
    selected_service_ids: tuple[str, ...] = ()
    estimated_price: int = 0
    pricing_factors: AssessmentPricingFactors = field(default_factory=AssessmentPricingFactors)
    status: AssessmentStatus = AssessmentStatus.draft
    converted_booking_id: str | None = None
    created_at: datetime | None = None
    submitted_at: datetime | None = None

    def to_document(self) -> dict[str, Any]:
        return {
            "tenant_id": self.tenant_id,
            "client_id": self.client_id,
            "vehicle_info": self.vehicle_info.to_document(),
            "condition": self.condition.to_document(),
            "selected_service_ids": list(self.selected_service_ids),
            "estimated_price": self.estimated_price,
            "pricing_factors": self.pricing_factors.to_document(),
            "status": self.status.value,
            "converted_booking_id": self.converted_booking_id,
            "created_at": to_epoch(self.created_at),
            "submitted_at": to_epoch(self.submitted_at),
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Assessment":
        return cls(
            id=doc["id"],
            tenant_id=doc["tenant_id"],
            client_id=doc["client_id"],
            vehicle_info=VehicleInfo.from_document(doc["vehicle_info"]),
            condition=ConditionAssessment.from_document(doc.get("condition") or {}),
            selected_service_ids=tuple(doc.get("selected_service_ids") or ()),
            estimated_price=int(doc.get("estimated_price", 0)),
            pricing_factors=AssessmentPricingFactors.from_document(doc.get("pricing_factors") or {}),
            status=AssessmentStatus(doc.get("status", "draft")),
            converted_booking_id=doc.get("converted_booking_id"),
            created_at=from_epoch(doc.get("created_at")),
            submitted_at=from_epoch(doc.get("submitted_at")),
        )
