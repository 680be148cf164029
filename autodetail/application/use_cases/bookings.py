from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

from autodetail.application.authorization import Action, authorize
from autodetail.application.exceptions import NotFound, ValidationError
from autodetail.application.ports.document_store import (
    BOOKINGS,
    PRICING_HISTORY,
    TENANTS,
    VEHICLES,
    DocumentStorePort,
)
from autodetail.application.use_cases.booking_workflow import BookingLifecycleWorkflow
from autodetail.application.use_cases.pricing import PricingCalculator
from autodetail.application.use_cases.services import ServiceCatalogUseCase
from autodetail.application.utils.pricing_rules import calendar_features, demand_level, time_of_day_bucket
from autodetail.application.utils.transitions import can_transition_booking
from autodetail.application.utils.validation import validate_booking_request
from autodetail.domain.entities.booking import Booking, BookingStatus, Location, PricingFactors
from autodetail.domain.entities.pricing_history import PricingHistory
from autodetail.domain.entities.service import Service
from autodetail.domain.entities.timestamps import ensure_utc, to_epoch, utcnow
from autodetail.domain.entities.user import User
from autodetail.domain.entities.vehicle import Vehicle


@dataclass(frozen=True)
class BookingDetails:
    booking: Booking
    vehicle: Vehicle | None
    services: list[Service]


class BookingsUseCase:
    def __init__(
        self,
        store: DocumentStorePort,
        catalog: ServiceCatalogUseCase,
        pricing: PricingCalculator,
        workflow: BookingLifecycleWorkflow,
        timezone: ZoneInfo,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._pricing = pricing
        self._workflow = workflow
        self._timezone = timezone
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    # -- creation -------------------------------------------------------

    def create_booking(
        self,
        actor: User | None,
        vehicle_id: str | None,
        service_ids: list[str],
        scheduled_at: datetime | None,
        location: dict[str, Any],
        notes: str | None = None,
        tenant_id: str | None = None,
    ) -> Booking:
        """
        Quote and persist a booking for the caller's own vehicle.

        The price is always computed here; the frozen factors become the
        contract with the customer. Booking, pricing history and the workflow
        run are written in one transaction.
        """
        authorize(actor, Action.booking_create)
        now = self._clock()
        if scheduled_at is not None:
            scheduled_at = ensure_utc(scheduled_at)
        validate_booking_request(vehicle_id, service_ids, scheduled_at, location, now)

        vehicle_doc = self._store.get(VEHICLES, vehicle_id)
        if vehicle_doc is None:
            raise NotFound(f"Vehicle {vehicle_id} not found")
        vehicle = Vehicle.from_document(vehicle_doc)
        authorize(actor, Action.vehicle_access, vehicle)

        tenant_id = tenant_id or actor.tenant_id or vehicle.tenant_id
        quote = self._pricing.calculate_price(
            service_ids,
            vehicle.vehicle_type,
            scheduled_at,
            customer_id=actor.id,
            require_nonzero=True,
            tenant_id=tenant_id,
        )
        booking = Booking(
            id="",
            user_id=actor.id,
            tenant_id=tenant_id,
            vehicle_id=vehicle.id,
            service_ids=tuple(service_ids),
            scheduled_at=scheduled_at,
            status=self._initial_status(tenant_id),
            total_price=quote.final_price,
            pricing_factors=PricingFactors(
                base_price=quote.base_price,
                vehicle_multiplier=quote.vehicle_multiplier,
                demand_multiplier=quote.demand_multiplier,
                seasonal_multiplier=quote.seasonal_multiplier,
                loyalty_discount=quote.loyalty_discount,
                final_price=quote.final_price,
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
        return self.record(booking, vehicle.vehicle_type.value, now)

    def record(self, booking: Booking, vehicle_type: str, now: datetime | None = None) -> Booking:
        """Insert a priced booking with its history record and lifecycle run."""
        now = now or self._clock()
        features = calendar_features(booking.scheduled_at, self._timezone)
        with self._store.transaction():
            booking_id = self._store.insert(BOOKINGS, booking.to_document())
            booking = replace(booking, id=booking_id)
            history = PricingHistory(
                id="",
                booking_id=booking_id,
                tenant_id=booking.tenant_id,
                service_ids=booking.service_ids,
                vehicle_type=vehicle_type,
                scheduled_at=booking.scheduled_at,
                day_of_week=features.day_of_week,
                time_of_day=time_of_day_bucket(features.hour),
                demand_level=demand_level(booking.pricing_factors.demand_multiplier),
                base_price=booking.pricing_factors.base_price,
                final_price=booking.total_price,
                was_accepted=True,
            )
            self._store.insert(PRICING_HISTORY, history.to_document())
            self._workflow.schedule(booking, now)
        self._logger.info(
            "Booking created",
            extra={"booking_id": booking_id, "tenant_id": booking.tenant_id, "reason": booking.status.value},
        )
        return booking

    def _initial_status(self, tenant_id: str | None) -> BookingStatus:
        if tenant_id:
            tenant = self._store.get(TENANTS, tenant_id)
            if tenant and (tenant.get("settings") or {}).get("auto_approve_bookings"):
                return BookingStatus.confirmed
        return BookingStatus.pending

    # -- reads ----------------------------------------------------------

    def require(self, booking_id: str) -> Booking:
        doc = self._store.get(BOOKINGS, booking_id)
        if doc is None:
            raise NotFound(f"Booking {booking_id} not found")
        return Booking.from_document(doc)

    def get(self, actor: User | None, booking_id: str) -> BookingDetails:
        booking = self.require(booking_id)
        authorize(actor, Action.booking_read, booking)
        return self._details(booking)

    def list_mine(self, actor: User | None) -> list[BookingDetails]:
        authorize(actor, Action.booking_create)
        docs = self._store.find(BOOKINGS, user_id=actor.id)
        bookings = sorted((Booking.from_document(d) for d in docs), key=lambda b: b.scheduled_at)
        return [self._details(b) for b in bookings]

    def list_all(self, actor: User | None, status: BookingStatus | None = None) -> list[Booking]:
        authorize(actor, Action.booking_list_all)
        filters: dict[str, Any] = {}
        if status is not None:
            filters["status"] = status.value
        if actor.tenant_id is not None:
            filters["tenant_id"] = actor.tenant_id
        docs = self._store.find(BOOKINGS, **filters)
        return sorted((Booking.from_document(d) for d in docs), key=lambda b: b.scheduled_at)

    def completed_count(self, user_id: str) -> int:
        return self._pricing.completed_booking_count(user_id)

    def _details(self, booking: Booking) -> BookingDetails:
        vehicle = None
        if booking.vehicle_id:
            doc = self._store.get(VEHICLES, booking.vehicle_id)
            vehicle = Vehicle.from_document(doc) if doc else None
        services = [s for s in (self._catalog.get(sid) for sid in booking.service_ids) if s is not None]
        return BookingDetails(booking=booking, vehicle=vehicle, services=services)

    # -- operator actions -----------------------------------------------

    def update_status(self, actor: User | None, booking_id: str, status: BookingStatus) -> Booking:
        booking = self.require(booking_id)
        authorize(actor, Action.booking_operate, booking)
        if not can_transition_booking(booking.status, status):
            raise ValidationError(
                {"status": f"Cannot move a {booking.status.value} booking to {status.value}"}
            )

        changes: dict[str, Any] = {"status": status.value}
        completed_at = None
        if status == BookingStatus.completed:
            completed_at = self._clock()
            changes["completed_at"] = to_epoch(completed_at)

        # The lifecycle workflow may have moved the booking since it was read.
        if not self._store.compare_and_patch(BOOKINGS, booking_id, "status", booking.status.value, changes):
            current = self.require(booking_id)
            raise ValidationError(
                {"status": f"Booking changed to {current.status.value} while updating, please retry"}
            )
        self._logger.info(
            "Booking status updated",
            extra={"booking_id": booking_id, "tenant_id": booking.tenant_id, "reason": status.value},
        )
        return replace(booking, status=status, completed_at=completed_at or booking.completed_at)

    def assign_detailer(self, actor: User | None, booking_id: str, detailer_id: str) -> Booking:
        booking = self.require(booking_id)
        authorize(actor, Action.booking_operate, booking)
        self._store.patch(BOOKINGS, booking_id, {"assigned_detailer_id": detailer_id})
        return replace(booking, assigned_detailer_id=detailer_id)
