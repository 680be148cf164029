"""
Tests for tenant onboarding, walk-in clients and the self-assessment intake.
"""

from __future__ import annotations

from datetime import timedelta

import pytest

from autodetail.application.exceptions import InvariantViolation, NotFound, Unauthorized, ValidationError
from autodetail.application.ports.document_store import ASSESSMENTS, BOOKINGS
from autodetail.domain.entities.assessment import (
    AssessmentStatus,
    ConditionAssessment,
    ConditionGrade,
    ExteriorCondition,
)
from autodetail.domain.entities.booking import BookingStatus
from autodetail.domain.entities.tenant import SubscriptionPlan
from autodetail.domain.entities.user import UserRole

from conftest import VALID_LOCATION, make_service, make_user

CONTACT = {
    "email": "hello@shinemobile.com",
    "phone": "503-555-0100",
    **VALID_LOCATION,
}

VEHICLE_INFO = {"make": "Toyota", "model": "RAV4", "year": 2021, "color": "Silver", "vehicle_type": "suv"}


@pytest.fixture
def owner(store):
    return make_user(store, "owner")


@pytest.fixture
def tenant(container, owner):
    return container.tenants.create_tenant(owner, "Shine Mobile Detailing", "shine-mobile", CONTACT)


@pytest.fixture
def staff(container, owner, tenant):
    return container.users.get(owner.id)


@pytest.fixture
def client(container, tenant):
    return container.clients.create_or_get(tenant.id, "Jane@Example.com", "Jane Doe", "503-555-0199")


def test_create_tenant_makes_caller_owner(container, owner, tenant, clock):
    reloaded = container.users.get(owner.id)

    assert reloaded.role == UserRole.tenant_owner
    assert reloaded.tenant_id == tenant.id
    assert tenant.owner_subject == owner.subject
    assert tenant.qr_code.startswith("shine-mobile-")
    assert tenant.subscription.plan == SubscriptionPlan.free
    assert tenant.subscription.current_period_end == clock() + timedelta(days=30)
    assert tenant.settings.notification_email == CONTACT["email"]

    assert container.tenants.get_by_slug("shine-mobile").id == tenant.id
    assert container.tenants.get_by_qr_code(tenant.qr_code).id == tenant.id
    assert container.tenants.my_tenant(reloaded).id == tenant.id
    assert container.tenants.get_by_slug("nobody") is None


def test_slug_rules(container, store, tenant):
    other = make_user(store, "other")

    with pytest.raises(ValidationError) as exc:
        container.tenants.create_tenant(other, "Another Shine", "shine-mobile", CONTACT)
    assert "slug" in exc.value.errors

    with pytest.raises(ValidationError):
        container.tenants.create_tenant(other, "Bad Slug", "Bad Slug!", CONTACT)


def test_only_owner_updates_settings(container, store, staff, tenant):
    stranger = make_user(store, "stranger")

    with pytest.raises(InvariantViolation):
        container.tenants.update_settings(stranger, tenant.id, {"auto_approve_bookings": True})
    with pytest.raises(ValidationError):
        container.tenants.update_settings(staff, tenant.id, {"free_car_wash": True})

    updated = container.tenants.update_settings(
        staff, tenant.id, {"require_vin": True}, branding={"primary_color": "#111111"}
    )

    assert updated.settings.require_vin is True
    assert container.tenants.require(tenant.id).branding.primary_color == "#111111"
    assert container.tenants.require(tenant.id).settings.allow_self_assessment is True


def test_public_profile_hides_owner(container, tenant):
    profile = container.tenants.public_profile(tenant)

    assert profile["slug"] == "shine-mobile"
    assert "owner_subject" not in profile
    assert "subscription" not in profile


def test_clients_are_deduplicated_per_tenant(container, store, staff, tenant, client):
    again = container.clients.create_or_get(tenant.id, "jane@example.com ", "Jane D.", "503-555-0199")

    assert again.id == client.id
    assert client.email == "jane@example.com"
    assert [c.id for c in container.clients.list_for_tenant(staff, tenant.id)] == [client.id]

    with pytest.raises(NotFound):
        container.clients.create_or_get("missing", "jane@example.com", "Jane Doe", "503-555-0199")
    with pytest.raises(ValidationError):
        container.clients.create_or_get(tenant.id, "not-an-email", "Jane Doe", "503-555-0199")
    with pytest.raises(Unauthorized):
        container.clients.list_for_tenant(make_user(store, "nosy"), tenant.id)


def test_assessment_to_booking(container, store, notifier, clock, staff, tenant, client):
    """Draft, price, submit, review, approve and convert into a confirmed booking."""
    service = make_service(store, base_price=100, tenant_id=tenant.id)
    assessment = container.assessments.create(tenant.id, client.id, VEHICLE_INFO)
    assert assessment.status == AssessmentStatus.draft

    priced = container.assessments.update_services(assessment.id, [service.id])
    assert priced.estimated_price == 100

    condition = ConditionAssessment(exterior=ExteriorCondition(paint=ConditionGrade.fair, scratches=True))
    priced = container.assessments.update_condition(assessment.id, condition)
    assert priced.estimated_price == 120
    assert container.assessments.require(assessment.id).pricing_factors.final_price == 120

    submitted = container.assessments.submit(assessment.id)
    assert submitted.submitted_at == clock()
    assert container.clients.get(client.id).last_assessment_at == clock()
    with pytest.raises(ValidationError):
        container.assessments.update_services(assessment.id, [])

    with pytest.raises(Unauthorized):
        container.assessments.review(make_user(store, "customer"), assessment.id)
    container.assessments.review(staff, assessment.id)

    with pytest.raises(ValidationError):
        container.assessments.convert_to_booking(staff, assessment.id, clock() + timedelta(days=2), VALID_LOCATION)
    container.assessments.approve(staff, assessment.id)

    booking = container.assessments.convert_to_booking(
        staff, assessment.id, clock() + timedelta(days=2), VALID_LOCATION, notes="Driveway"
    )

    assert booking.status == BookingStatus.confirmed
    assert booking.total_price == 120
    assert booking.client_id == client.id
    assert booking.user_id is None
    assert booking.source_assessment_id == assessment.id
    converted = container.assessments.require(assessment.id)
    assert converted.status == AssessmentStatus.converted
    assert converted.converted_booking_id == booking.id

    container.due_timers.execute(clock())
    assert notifier.sent[0].recipient_email == "jane@example.com"

    stats = container.tenants.tenant_stats(staff, tenant.id)
    assert stats.total_assessments == 1
    assert stats.total_bookings == 1
    assert stats.total_clients == 1
    assert stats.conversion_rate == 100.0

    listed = container.assessments.list_for_tenant(staff, tenant.id, AssessmentStatus.converted)
    assert [d.assessment.id for d in listed] == [assessment.id]
    assert listed[0].client.id == client.id


def test_conversion_is_all_or_nothing(container, store, clock, staff, tenant, client, monkeypatch):
    service = make_service(store, tenant_id=tenant.id)
    assessment = container.assessments.create(tenant.id, client.id, VEHICLE_INFO)
    container.assessments.update_services(assessment.id, [service.id])
    container.assessments.submit(assessment.id)
    container.assessments.review(staff, assessment.id)
    container.assessments.approve(staff, assessment.id)

    def fail(*args, **kwargs):
        raise RuntimeError("scheduler unavailable")

    monkeypatch.setattr(container.workflow, "schedule", fail)
    with pytest.raises(RuntimeError):
        container.assessments.convert_to_booking(staff, assessment.id, clock() + timedelta(days=1), VALID_LOCATION)

    assert store.find(BOOKINGS) == []
    assert store.get(ASSESSMENTS, assessment.id)["status"] == AssessmentStatus.approved.value


def test_submit_requires_services(container, tenant, client):
    assessment = container.assessments.create(tenant.id, client.id, VEHICLE_INFO)

    with pytest.raises(ValidationError):
        container.assessments.submit(assessment.id)


def test_tenant_settings_gate_intake(container, staff, tenant, client):
    container.tenants.update_settings(staff, tenant.id, {"require_vin": True})
    with pytest.raises(ValidationError) as exc:
        container.assessments.create(tenant.id, client.id, VEHICLE_INFO)
    assert "vin" in exc.value.errors
    assert container.assessments.create(tenant.id, client.id, {**VEHICLE_INFO, "vin": "1HGCM82633A004352"})

    container.tenants.update_settings(staff, tenant.id, {"allow_self_assessment": False})
    with pytest.raises(ValidationError):
        container.assessments.create(tenant.id, client.id, VEHICLE_INFO)


def test_client_must_belong_to_tenant(container, store, tenant, client):
    rival_owner = make_user(store, "rival")
    rival = container.tenants.create_tenant(rival_owner, "Rival Detail Co", "rival-detail", CONTACT)

    with pytest.raises(NotFound):
        container.assessments.create(rival.id, client.id, VEHICLE_INFO)


def test_stats_without_assessments(container, staff, tenant):
    stats = container.tenants.tenant_stats(staff, tenant.id)

    assert stats.conversion_rate == 0.0
    assert stats.total_revenue == 0
