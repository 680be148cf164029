"""
Tests for the date-driven pricing calculator.
"""

from __future__ import annotations

from datetime import datetime
from itertools import permutations
from zoneinfo import ZoneInfo

import pytest

from autodetail.application.exceptions import NotFound, ValidationError
from autodetail.application.ports.document_store import BOOKINGS, SERVICES
from autodetail.application.use_cases.knowledge import PricingKnowledgeUseCase
from autodetail.application.use_cases.pricing import PricingCalculator
from autodetail.application.use_cases.services import ServiceCatalogUseCase
from autodetail.application.utils.pricing_rules import (
    calendar_features,
    demand_multiplier,
    loyalty_discount,
    seasonal_multiplier,
    time_of_day_multiplier,
)
from autodetail.infrastructure.embeddings.hashing_embedder import HashingEmbedder
from autodetail.infrastructure.knowledge.pricing_seed import PRICING_KNOWLEDGE_SEED
from autodetail.infrastructure.knowledge.vector_store import VectorKnowledgeStore

from conftest import make_service

LA = ZoneInfo("America/Los_Angeles")
SATURDAY_JUNE_3PM = datetime(2026, 6, 13, 15, 0, tzinfo=LA)


def _calculator(store, knowledge=None) -> PricingCalculator:
    return PricingCalculator(catalog=ServiceCatalogUseCase(store), store=store, timezone=LA, knowledge=knowledge)


def test_saturday_afternoon_in_june(store):
    """Service at 100 on a June Saturday at 15:00 with no history costs 152."""
    service = make_service(store, base_price=100)

    quote = _calculator(store).calculate_price([service.id], "sedan", SATURDAY_JUNE_3PM, customer_id="u1")

    assert quote.base_price == 100
    assert quote.demand_multiplier == 1.15
    assert quote.seasonal_multiplier == 1.2
    assert quote.time_multiplier == 1.1
    assert quote.loyalty_discount == 0.0
    assert quote.final_price == 152


def test_loyal_customer_gets_ten_percent_off(store):
    """Five completed bookings take the same quote down to 137."""
    service = make_service(store, base_price=100)
    for _ in range(5):
        store.insert(BOOKINGS, {"user_id": "u1", "status": "completed"})
    store.insert(BOOKINGS, {"user_id": "u1", "status": "cancelled"})

    quote = _calculator(store).calculate_price([service.id], "sedan", SATURDAY_JUNE_3PM, customer_id="u1")

    assert quote.loyalty_discount == 0.1
    assert quote.final_price == 137
    assert quote.steps.after_time == 152


def test_anonymous_quote_has_no_discount(store):
    service = make_service(store, base_price=100)
    for _ in range(5):
        store.insert(BOOKINGS, {"user_id": "u1", "status": "completed"})

    quote = _calculator(store).calculate_price([service.id], "sedan", SATURDAY_JUNE_3PM)

    assert quote.loyalty_discount == 0.0
    assert quote.final_price == 152


def test_no_services_prices_at_zero(store):
    """An empty selection is a valid zero quote unless a non-zero price is required."""
    quote = _calculator(store).calculate_price([], "sedan", SATURDAY_JUNE_3PM)

    assert quote.base_price == 0
    assert quote.final_price == 0
    assert quote.demand_multiplier == 1.15
    assert quote.vehicle_multiplier == 1.0

    with pytest.raises(ValidationError):
        _calculator(store).calculate_price([], "sedan", SATURDAY_JUNE_3PM, require_nonzero=True)


def test_missing_multiplier_defaults_to_one_with_warning(store):
    service_id = store.insert(
        SERVICES,
        {
            "name": "Legacy Wash",
            "description": "Service stored before multipliers were complete.",
            "category": "exterior",
            "base_price": 100,
            "duration_minutes": 30,
            "is_active": True,
            "vehicle_type_multipliers": {"sedan": 1.0},
        },
    )

    quote = _calculator(store).calculate_price([service_id], "suv", SATURDAY_JUNE_3PM)

    assert quote.base_price == 100
    assert quote.final_price == 152
    assert len(quote.warnings) == 1
    assert "Legacy Wash" in quote.warnings[0]


def test_vehicle_multipliers_apply_per_service(store):
    wash = make_service(store, name="Wash", base_price=49, multipliers={"sedan": 1.0, "suv": 1.3, "truck": 1.4, "van": 1.4, "coupe": 1.0, "luxury": 1.5})
    interior = make_service(store, name="Interior", base_price=129, multipliers={"sedan": 1.0, "suv": 1.3, "truck": 1.2, "van": 1.5, "coupe": 0.9, "luxury": 1.4})

    # Tuesday in January at 10:00: 0.95 x 0.90 x 0.90
    tuesday = datetime(2026, 1, 13, 10, 0, tzinfo=LA)
    quote = _calculator(store).calculate_price([wash.id, interior.id], "suv", tuesday)

    # 49 x 1.3 + 129 x 1.3 = 231.4 -> 231.4 x 0.95 x 0.9 x 0.9 = 178.0623
    assert quote.base_price == 231
    assert quote.final_price == 178
    assert quote.vehicle_multiplier == 1.3


def test_final_price_ignores_service_order(store):
    ids = [
        make_service(store, name="A", base_price=49, multipliers={"luxury": 1.5}).id,
        make_service(store, name="B", base_price=149, multipliers={"luxury": 1.6}).id,
        make_service(store, name="C", base_price=89, multipliers={"luxury": 1.2}).id,
    ]
    calculator = _calculator(store)
    friday = datetime(2026, 10, 16, 19, 0, tzinfo=LA)

    prices = {calculator.calculate_price(list(order), "luxury", friday).final_price for order in permutations(ids)}

    assert len(prices) == 1
    assert prices.pop() >= 0


def test_unknown_service_is_not_found(store):
    with pytest.raises(NotFound):
        _calculator(store).calculate_price(["missing"], "sedan", SATURDAY_JUNE_3PM)


def test_calendar_rules_are_exhaustive():
    assert [demand_multiplier(d) for d in range(7)] == [0.95, 0.95, 0.95, 0.95, 1.10, 1.15, 1.15]
    assert [seasonal_multiplier(m) for m in (3, 4, 9, 10)] == [0.9, 1.2, 1.2, 0.9]
    assert [time_of_day_multiplier(h) for h in (7, 8, 11, 12, 14, 17, 18)] == [1.0, 0.9, 0.9, 1.0, 1.1, 1.1, 1.0]


def test_loyalty_discount_steps_at_three_and_five():
    discounts = [loyalty_discount(n) for n in range(8)]

    assert discounts == [0.0, 0.0, 0.0, 0.05, 0.05, 0.1, 0.1, 0.1]
    assert discounts == sorted(discounts)


def test_calendar_features_use_business_timezone():
    """02:00 UTC on a Sunday is still Saturday evening in Los Angeles."""
    from datetime import timezone

    features = calendar_features(datetime(2026, 6, 14, 2, 0, tzinfo=timezone.utc), LA)

    assert features.day_of_week == 5
    assert features.hour == 19


class BrokenEmbedder(HashingEmbedder):
    def embed(self, texts):
        raise RuntimeError("embedding service down")


def test_insight_failure_does_not_block_quote(store):
    service = make_service(store, base_price=100)
    knowledge = PricingKnowledgeUseCase(BrokenEmbedder(), VectorKnowledgeStore(store))

    quote = _calculator(store, knowledge).calculate_price([service.id], "sedan", SATURDAY_JUNE_3PM)

    assert quote.final_price == 152
    assert quote.insights == []


def test_insights_are_advisory_text(store):
    service = make_service(store, base_price=100)
    knowledge = PricingKnowledgeUseCase(HashingEmbedder(), VectorKnowledgeStore(store), search_limit=5, insight_limit=3)
    knowledge.seed(PRICING_KNOWLEDGE_SEED)

    with_insights = _calculator(store, knowledge).calculate_price([service.id], "sedan", SATURDAY_JUNE_3PM)
    without = _calculator(store).calculate_price([service.id], "sedan", SATURDAY_JUNE_3PM)

    assert 0 < len(with_insights.insights) <= 3
    assert all(isinstance(text, str) for text in with_insights.insights)
    assert with_insights.final_price == without.final_price
