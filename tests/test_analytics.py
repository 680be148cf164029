"""
Tests for the pricing analytics rollup.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from autodetail.application.exceptions import Unauthenticated, Unauthorized
from autodetail.application.ports.document_store import PRICING_HISTORY
from autodetail.domain.entities.pricing_history import DemandLevel, PricingHistory, TimeOfDay
from autodetail.domain.entities.user import UserRole

from conftest import make_user

START = datetime(2026, 5, 1, tzinfo=timezone.utc)
END = datetime(2026, 6, 1, tzinfo=timezone.utc)


def _record(store, vehicle_type, base, final, accepted=True, when=START + timedelta(days=3)):
    history = PricingHistory(
        id="",
        booking_id=f"b-{len(store.find(PRICING_HISTORY))}",
        service_ids=("s1",),
        vehicle_type=vehicle_type,
        scheduled_at=when,
        day_of_week=when.weekday(),
        time_of_day=TimeOfDay.morning,
        demand_level=DemandLevel.medium,
        base_price=base,
        final_price=final,
        was_accepted=accepted,
    )
    store.insert(PRICING_HISTORY, history.to_document())


@pytest.fixture
def admin(store):
    return make_user(store, "admin", role=UserRole.admin)


def test_empty_window_is_all_zeros(container, admin):
    analytics = container.analytics.get_pricing_analytics(admin, START, END)

    assert analytics.total_bookings == 0
    assert analytics.acceptance_rate == 0.0
    assert analytics.avg_final_price == 0.0
    assert analytics.price_by_vehicle_type == []


def test_rollup_groups_by_vehicle_type(container, store, admin):
    _record(store, "sedan", 100, 110)
    _record(store, "suv", 130, 150)
    _record(store, "suv", 130, 171, accepted=False)

    analytics = container.analytics.get_pricing_analytics(admin, START, END)

    assert analytics.total_bookings == 3
    assert analytics.accepted_bookings == 2
    assert analytics.acceptance_rate == 66.67
    assert analytics.avg_base_price == 120.0
    assert analytics.avg_final_price == 143.67
    assert [(g.vehicle_type, g.count, g.avg_price) for g in analytics.price_by_vehicle_type] == [
        ("sedan", 1, 110.0),
        ("suv", 2, 160.5),
    ]


def test_window_is_half_open(container, store, admin):
    _record(store, "sedan", 100, 100, when=START)
    _record(store, "sedan", 100, 100, when=END)
    _record(store, "sedan", 100, 100, when=START - timedelta(seconds=1))

    assert container.analytics.get_pricing_analytics(admin, START, END).total_bookings == 1


def test_unrecognised_vehicle_type_keeps_its_own_group(container, store, admin):
    _record(store, "motorcycle", 50, 55)

    groups = container.analytics.get_pricing_analytics(admin, START, END).price_by_vehicle_type

    assert [g.vehicle_type for g in groups] == ["motorcycle"]


def test_analytics_are_admin_only(container, store):
    customer = make_user(store, "customer")
    owner = make_user(store, "owner", role=UserRole.tenant_owner, tenant_id="t1")

    with pytest.raises(Unauthorized):
        container.analytics.get_pricing_analytics(customer, START, END)
    with pytest.raises(Unauthorized):
        container.analytics.get_pricing_analytics(owner, START, END)
    with pytest.raises(Unauthenticated):
        container.analytics.get_pricing_analytics(None, START, END)
