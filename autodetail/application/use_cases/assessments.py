from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from autodetail.application.authorization import Action, authorize
from autodetail.application.exceptions import NotFound, ValidationError
from autodetail.application.ports.document_store import ASSESSMENTS, CLIENTS, TENANTS, DocumentStorePort
from autodetail.application.use_cases.assessment_pricing import price_by_condition
from autodetail.application.use_cases.bookings import BookingsUseCase
from autodetail.application.use_cases.services import ServiceCatalogUseCase
from autodetail.application.utils.transitions import can_transition_assessment
from autodetail.application.utils.validation import validate_booking_request, validate_vehicle_fields
from autodetail.domain.entities.assessment import (
    Assessment,
    AssessmentStatus,
    ConditionAssessment,
    VehicleInfo,
)
from autodetail.domain.entities.booking import Booking, BookingStatus, Location, PricingFactors
from autodetail.domain.entities.client import Client
from autodetail.domain.entities.service import Service
from autodetail.domain.entities.tenant import Tenant
from autodetail.domain.entities.timestamps import ensure_utc, to_epoch, utcnow
from autodetail.domain.entities.user import User
from autodetail.domain.entities.vehicle import VehicleType


@dataclass(frozen=True)
class AssessmentDetails:
    assessment: Assessment
    client: Client | None
    services: list[Service]


class AssessmentsUseCase:
    """
    Self-service intake: a tenant's client describes the vehicle and its
    condition, picks services and receives a condition-based estimate. Staff
    then review, approve and convert it into a booking.

    Status only moves forward: draft -> submitted -> reviewed -> approved -> converted.
    """

    def __init__(
        self,
        store: DocumentStorePort,
        catalog: ServiceCatalogUseCase,
        bookings: BookingsUseCase,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._bookings = bookings
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    def create(self, tenant_id: str, client_id: str, vehicle_info: dict[str, Any]) -> Assessment:
        tenant = self._require_tenant(tenant_id)
        if not tenant.settings.allow_self_assessment:
            raise ValidationError({"tenant": "This business does not accept self-assessments"})
        if tenant.settings.require_vin and not (vehicle_info.get("vin") or "").strip():
            raise ValidationError({"vin": "VIN is required"})
        validate_vehicle_fields(vehicle_info, self._clock())

        client_doc = self._store.get(CLIENTS, client_id)
        if client_doc is None or client_doc["tenant_id"] != tenant_id:
            raise NotFound(f"Client {client_id} not found")

        assessment = Assessment(
            id="",
            tenant_id=tenant_id,
            client_id=client_id,
            vehicle_info=VehicleInfo(
                vin=vehicle_info.get("vin"),
                make=vehicle_info["make"].strip(),
                model=vehicle_info["model"].strip(),
                year=vehicle_info["year"],
                color=vehicle_info["color"].strip(),
                vehicle_type=VehicleType(vehicle_info["vehicle_type"]),
            ),
            created_at=self._clock(),
        )
        assessment_id = self._store.insert(ASSESSMENTS, assessment.to_document())
        return replace(assessment, id=assessment_id)

    def require(self, assessment_id: str) -> Assessment:
        doc = self._store.get(ASSESSMENTS, assessment_id)
        if doc is None:
            raise NotFound(f"Assessment {assessment_id} not found")
        return Assessment.from_document(doc)

    def get(self, assessment_id: str) -> AssessmentDetails:
        return self._details(self.require(assessment_id))

    def list_for_tenant(
        self,
        actor: User | None,
        tenant_id: str,
        status: AssessmentStatus | None = None,
    ) -> list[AssessmentDetails]:
        authorize(actor, Action.tenant_read_private, self._require_tenant(tenant_id))
        filters: dict[str, Any] = {"tenant_id": tenant_id}
        if status is not None:
            filters["status"] = status.value
        assessments = [Assessment.from_document(d) for d in self._store.find(ASSESSMENTS, **filters)]
        assessments.sort(key=lambda a: to_epoch(a.created_at) or 0.0, reverse=True)
        return [self._details(a) for a in assessments]

    # -- draft editing --------------------------------------------------

    def update_condition(self, assessment_id: str, condition: ConditionAssessment) -> Assessment:
        assessment = self._require_draft(assessment_id)
        assessment = self._priced(replace(assessment, condition=condition))
        self._store.patch(ASSESSMENTS, assessment_id, self._pricing_changes(assessment))
        return assessment

    def update_services(self, assessment_id: str, service_ids: list[str]) -> Assessment:
        assessment = self._require_draft(assessment_id)
        assessment = self._priced(replace(assessment, selected_service_ids=tuple(service_ids)))
        self._store.patch(ASSESSMENTS, assessment_id, self._pricing_changes(assessment))
        return assessment

    def _priced(self, assessment: Assessment) -> Assessment:
        services = self._catalog.get_many(list(assessment.selected_service_ids))
        quote = price_by_condition(services, assessment.vehicle_info.vehicle_type, assessment.condition)
        for warning in quote.warnings:
            self._logger.warning(
                "Pricing multiplier defaulted",
                extra={"tenant_id": assessment.tenant_id, "reason": warning},
            )
        return replace(assessment, estimated_price=quote.estimated_price, pricing_factors=quote.factors)

    @staticmethod
    def _pricing_changes(assessment: Assessment) -> dict[str, Any]:
        doc = assessment.to_document()
        return {
            key: doc[key]
            for key in ("condition", "selected_service_ids", "estimated_price", "pricing_factors")
        }

    def _require_draft(self, assessment_id: str) -> Assessment:
        assessment = self.require(assessment_id)
        if assessment.status != AssessmentStatus.draft:
            raise ValidationError({"status": "Only draft assessments can be edited"})
        return assessment

    # -- status moves ---------------------------------------------------

    def submit(self, assessment_id: str) -> Assessment:
        assessment = self.require(assessment_id)
        if not assessment.selected_service_ids:
            raise ValidationError({"services": "Please select at least one service"})
        now = self._clock()
        with self._store.transaction():
            assessment = self._move(assessment, AssessmentStatus.submitted, {"submitted_at": to_epoch(now)})
            self._store.patch(CLIENTS, assessment.client_id, {"last_assessment_at": to_epoch(now)})
        return replace(assessment, submitted_at=now)

    def review(self, actor: User | None, assessment_id: str) -> Assessment:
        assessment = self.require(assessment_id)
        authorize(actor, Action.assessment_review, assessment)
        return self._move(assessment, AssessmentStatus.reviewed)

    def approve(self, actor: User | None, assessment_id: str) -> Assessment:
        assessment = self.require(assessment_id)
        authorize(actor, Action.assessment_review, assessment)
        return self._move(assessment, AssessmentStatus.approved)

    def convert_to_booking(
        self,
        actor: User | None,
        assessment_id: str,
        scheduled_at: datetime | None,
        location: dict[str, Any],
        notes: str | None = None,
    ) -> Booking:
        """Turn an approved assessment into a confirmed booking at its estimated price."""
        assessment = self.require(assessment_id)
        authorize(actor, Action.assessment_review, assessment)
        if not can_transition_assessment(assessment.status, AssessmentStatus.converted):
            raise ValidationError({"status": "Only approved assessments can be converted"})
        now = self._clock()
        if scheduled_at is not None:
            scheduled_at = ensure_utc(scheduled_at)
        validate_booking_request(
            None,
            list(assessment.selected_service_ids),
            scheduled_at,
            location,
            now,
            require_vehicle=False,
        )

        factors = assessment.pricing_factors
        booking = Booking(
            id="",
            user_id=None,
            vehicle_id=None,
            client_id=assessment.client_id,
            tenant_id=assessment.tenant_id,
            source_assessment_id=assessment.id,
            service_ids=assessment.selected_service_ids,
            scheduled_at=scheduled_at,
            status=BookingStatus.confirmed,
            total_price=assessment.estimated_price,
            pricing_factors=PricingFactors(
                base_price=factors.base_price,
                vehicle_multiplier=factors.vehicle_multiplier,
                demand_multiplier=factors.demand_multiplier,
                seasonal_multiplier=1.0,
                loyalty_discount=0.0,
                final_price=assessment.estimated_price,
            ),
            location=Location(
                address=location["address"].strip(),
                city=location["city"].strip(),
                state=location["state"].strip(),
                zip_code=location["zip_code"].strip(),
            ),
            notes=notes,
            created_at=now,
        )
        with self._store.transaction():
            booking = self._bookings.record(booking, assessment.vehicle_info.vehicle_type.value, now)
            self._move(assessment, AssessmentStatus.converted, {"converted_booking_id": booking.id})
        self._logger.info(
            "Assessment converted",
            extra={"booking_id": booking.id, "tenant_id": assessment.tenant_id, "reason": assessment.id},
        )
        return booking

    def _move(
        self,
        assessment: Assessment,
        status: AssessmentStatus,
        changes: dict[str, Any] | None = None,
    ) -> Assessment:
        if not can_transition_assessment(assessment.status, status):
            raise ValidationError(
                {"status": f"Cannot move a {assessment.status.value} assessment to {status.value}"}
            )
        changes = {**(changes or {}), "status": status.value}
        if not self._store.compare_and_patch(
            ASSESSMENTS, assessment.id, "status", assessment.status.value, changes
        ):
            raise ValidationError({"status": "Assessment changed while updating, please retry"})
        return replace(
            assessment,
            status=status,
            converted_booking_id=changes.get("converted_booking_id", assessment.converted_booking_id),
        )

    # -- helpers --------------------------------------------------------

    def _require_tenant(self, tenant_id: str) -> Tenant:
        doc = self._store.get(TENANTS, tenant_id)
        if doc is None:
            raise NotFound(f"Tenant {tenant_id} not found")
        return Tenant.from_document(doc)

    def _details(self, assessment: Assessment) -> AssessmentDetails:
        client_doc = self._store.get(CLIENTS, assessment.client_id)
        services = [s for s in (self._catalog.get(sid) for sid in assessment.selected_service_ids) if s]
        return AssessmentDetails(
            assessment=assessment,
            client=Client.from_document(client_doc) if client_doc else None,
            services=services,
        )
