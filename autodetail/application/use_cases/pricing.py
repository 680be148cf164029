from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

from autodetail.application.exceptions import ValidationError
from autodetail.application.ports.document_store import BOOKINGS, DocumentStorePort
from autodetail.application.use_cases.knowledge import PricingKnowledgeUseCase
from autodetail.application.use_cases.services import ServiceCatalogUseCase
from autodetail.application.utils.money import round_currency, round_display, to_decimal
from autodetail.application.utils.pricing_rules import (
    calendar_features,
    context_query,
    demand_multiplier,
    loyalty_discount,
    seasonal_multiplier,
    time_of_day_multiplier,
)
from autodetail.domain.entities.booking import BookingStatus
from autodetail.domain.entities.price_breakdown import PriceBreakdown, PriceSteps
from autodetail.domain.entities.service import DEFAULT_VEHICLE_MULTIPLIER, Service
from autodetail.domain.entities.vehicle import VehicleType


def accumulate_base_price(services: list[Service], vehicle_type: VehicleType | str) -> tuple[Decimal, list[str]]:
    """
    Sum of `base_price x vehicle multiplier` over the selected services.

    Exact decimal arithmetic keeps the sum independent of selection order.
    Returns the sum and a data-quality warning for every defaulted multiplier.
    """
    label = vehicle_type.value if isinstance(vehicle_type, VehicleType) else str(vehicle_type)
    total = Decimal(0)
    warnings: list[str] = []
    for service in services:
        total += to_decimal(service.base_price) * to_decimal(service.multiplier_for(vehicle_type))
        if _multiplier_defaulted(service, vehicle_type):
            warnings.append(f"{service.name}: no multiplier for '{label}', using 1.0")
    return total, warnings


def _multiplier_defaulted(service: Service, vehicle_type: VehicleType | str) -> bool:
    try:
        return VehicleType(vehicle_type) in service.missing_multipliers
    except ValueError:
        return True


class PricingCalculator:
    """Date-driven dynamic pricing used by the main booking flow."""

    def __init__(
        self,
        catalog: ServiceCatalogUseCase,
        store: DocumentStorePort,
        timezone: ZoneInfo,
        knowledge: PricingKnowledgeUseCase | None = None,
    ) -> None:
        self._catalog = catalog
        self._store = store
        self._timezone = timezone
        self._knowledge = knowledge
        self._logger = logging.getLogger(__name__)

    def completed_booking_count(self, customer_id: str) -> int:
        return len(self._store.find(BOOKINGS, user_id=customer_id, status=BookingStatus.completed.value))

    def calculate_price(
        self,
        service_ids: list[str],
        vehicle_type: VehicleType | str,
        scheduled_at: datetime,
        customer_id: str | None = None,
        require_nonzero: bool = False,
        tenant_id: str | None = None,
    ) -> PriceBreakdown:
        if require_nonzero and not service_ids:
            raise ValidationError({"services": "Please select at least one service"})

        services = self._catalog.get_many(list(service_ids))
        vehicle_key = vehicle_type.value if isinstance(vehicle_type, VehicleType) else str(vehicle_type)
        base, warnings = accumulate_base_price(services, vehicle_key)
        for warning in warnings:
            self._logger.warning("Pricing multiplier defaulted", extra={"reason": warning})

        features = calendar_features(scheduled_at, self._timezone)
        demand = demand_multiplier(features.day_of_week)
        seasonal = seasonal_multiplier(features.month)
        time_factor = time_of_day_multiplier(features.hour)

        discount = 0.0
        if customer_id:
            discount = loyalty_discount(self.completed_booking_count(customer_id))

        after_demand = base * to_decimal(demand)
        after_seasonal = after_demand * to_decimal(seasonal)
        before_discount = after_seasonal * to_decimal(time_factor)
        final_price = round_currency(before_discount * (1 - to_decimal(discount)))

        insights: list[str] = []
        if self._knowledge is not None:
            insights = self._knowledge.insights_for(context_query(vehicle_key, features), tenant_id=tenant_id)

        return PriceBreakdown(
            base_price=round_currency(base),
            vehicle_multiplier=services[0].multiplier_for(vehicle_key) if services else DEFAULT_VEHICLE_MULTIPLIER,
            demand_multiplier=round_display(demand),
            seasonal_multiplier=round_display(seasonal),
            time_multiplier=round_display(time_factor),
            loyalty_discount=round_display(discount),
            final_price=final_price,
            steps=PriceSteps(
                base=round_currency(base),
                after_demand=round_currency(after_demand),
                after_seasonal=round_currency(after_seasonal),
                after_time=round_currency(before_discount),
                final=final_price,
            ),
            insights=insights,
            warnings=warnings,
        )
