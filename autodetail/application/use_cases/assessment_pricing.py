from __future__ import annotations

from dataclasses import dataclass

from autodetail.application.use_cases.pricing import accumulate_base_price
from autodetail.application.utils.condition_scoring import condition_multiplier
from autodetail.application.utils.money import round_currency, to_decimal
from autodetail.domain.entities.assessment import AssessmentPricingFactors, ConditionAssessment
from autodetail.domain.entities.service import DEFAULT_VEHICLE_MULTIPLIER, Service
from autodetail.domain.entities.vehicle import VehicleType

# The self-assessment intake prices on vehicle condition instead of the
# calendar; demand stays neutral on this path.
ASSESSMENT_DEMAND_MULTIPLIER = 1.0


@dataclass(frozen=True)
class ConditionQuote:
    factors: AssessmentPricingFactors
    warnings: list[str]

    @property
    def estimated_price(self) -> int:
        return self.factors.final_price


def price_by_condition(
    services: list[Service],
    vehicle_type: VehicleType,
    condition: ConditionAssessment,
) -> ConditionQuote:
    base, warnings = accumulate_base_price(services, vehicle_type)
    multiplier = condition_multiplier(condition)
    final_price = round_currency(base * to_decimal(multiplier) * to_decimal(ASSESSMENT_DEMAND_MULTIPLIER))
    return ConditionQuote(
        factors=AssessmentPricingFactors(
            base_price=round_currency(base),
            vehicle_multiplier=services[0].multiplier_for(vehicle_type) if services else DEFAULT_VEHICLE_MULTIPLIER,
            condition_multiplier=multiplier,
            demand_multiplier=ASSESSMENT_DEMAND_MULTIPLIER,
            final_price=final_price,
        ),
        warnings=warnings,
    )
