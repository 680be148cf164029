"""
Tests for booking creation and operator actions.
"""

from __future__ import annotations

from datetime import timedelta

import pytest

from autodetail.application.exceptions import (
    InvariantViolation,
    NotFound,
    Unauthenticated,
    Unauthorized,
    ValidationError,
)
from autodetail.application.ports.document_store import (
    BOOKINGS,
    PRICING_HISTORY,
    SCHEDULED_TIMERS,
    TENANTS,
    WORKFLOW_CHECKPOINTS,
    WORKFLOW_STATES,
)
from autodetail.domain.entities.booking import BookingStatus
from autodetail.domain.entities.pricing_history import TimeOfDay
from autodetail.domain.entities.user import UserRole
from autodetail.domain.entities.workflow import WorkflowRunStatus

from conftest import VALID_LOCATION, make_service, make_user, make_vehicle

WRITTEN_TABLES = (BOOKINGS, PRICING_HISTORY, WORKFLOW_STATES, WORKFLOW_CHECKPOINTS, SCHEDULED_TIMERS)


def _counts(store):
    return {table: len(store.find(table)) for table in WRITTEN_TABLES}


@pytest.fixture
def customer(store):
    return make_user(store, "customer")


@pytest.fixture
def admin(store):
    return make_user(store, "admin", role=UserRole.admin)


def test_create_booking_writes_everything_together(container, store, customer, clock):
    vehicle = make_vehicle(store, customer)
    service = make_service(store, base_price=100)
    # Saturday 2026-06-13 22:00 UTC is 15:00 in Los Angeles.
    scheduled = clock().replace(day=13, hour=22)

    booking = container.bookings.create_booking(
        customer, vehicle.id, [service.id], scheduled, VALID_LOCATION, notes="Gate code 1234"
    )

    assert booking.status == BookingStatus.pending
    assert booking.total_price == 152
    assert booking.pricing_factors.final_price == 152
    assert booking.user_id == customer.id

    assert _counts(store) == {table: 1 for table in WRITTEN_TABLES}
    history = store.find(PRICING_HISTORY)[0]
    assert history["booking_id"] == booking.id
    assert history["final_price"] == 152
    assert history["was_accepted"] is True
    assert history["time_of_day"] == TimeOfDay.afternoon.value
    assert history["demand_level"] == "high"

    state = container.workflow.get_state(booking.id)
    assert state.status == WorkflowRunStatus.running
    assert state.current_step == "confirmation"


def test_cannot_book_someone_elses_vehicle(container, store, customer, clock):
    other = make_user(store, "other")
    vehicle = make_vehicle(store, other)
    service = make_service(store)

    with pytest.raises(InvariantViolation):
        container.bookings.create_booking(
            customer, vehicle.id, [service.id], clock() + timedelta(days=1), VALID_LOCATION
        )

    assert _counts(store) == {table: 0 for table in WRITTEN_TABLES}


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"zip_code": "9720"}, "zip_code"),
        ({"address": "1 A"}, "address"),
        ({"city": ""}, "city"),
    ],
)
def test_bad_location_is_rejected_before_writing(container, store, customer, clock, overrides, field):
    vehicle = make_vehicle(store, customer)
    service = make_service(store)

    with pytest.raises(ValidationError) as exc:
        container.bookings.create_booking(
            customer, vehicle.id, [service.id], clock() + timedelta(days=1), {**VALID_LOCATION, **overrides}
        )

    assert field in exc.value.errors
    assert _counts(store) == {table: 0 for table in WRITTEN_TABLES}


def test_past_date_and_empty_selection(container, store, customer, clock):
    vehicle = make_vehicle(store, customer)

    with pytest.raises(ValidationError) as exc:
        container.bookings.create_booking(customer, vehicle.id, [], clock() - timedelta(hours=1), VALID_LOCATION)

    assert set(exc.value.errors) == {"services", "date"}


def test_anonymous_caller_cannot_book(container, store, clock):
    with pytest.raises(Unauthenticated):
        container.bookings.create_booking(None, "v1", ["s1"], clock() + timedelta(days=1), VALID_LOCATION)


def test_unknown_vehicle_is_not_found(container, customer, clock):
    with pytest.raises(NotFound):
        container.bookings.create_booking(
            customer, "missing", ["s1"], clock() + timedelta(days=1), VALID_LOCATION
        )


def test_auto_approving_tenant_confirms_immediately(container, store, customer, clock):
    tenant_id = store.insert(TENANTS, {"slug": "shine", "settings": {"auto_approve_bookings": True}})
    vehicle = make_vehicle(store, customer)
    service = make_service(store)

    booking = container.bookings.create_booking(
        customer, vehicle.id, [service.id], clock() + timedelta(days=2), VALID_LOCATION, tenant_id=tenant_id
    )

    assert booking.status == BookingStatus.confirmed
    assert booking.tenant_id == tenant_id


def test_failed_workflow_registration_rolls_back(container, store, customer, clock, monkeypatch):
    vehicle = make_vehicle(store, customer)
    service = make_service(store)

    def fail(*args, **kwargs):
        raise RuntimeError("scheduler unavailable")

    monkeypatch.setattr(container.workflow, "schedule", fail)

    with pytest.raises(RuntimeError):
        container.bookings.create_booking(
            customer, vehicle.id, [service.id], clock() + timedelta(days=1), VALID_LOCATION
        )

    assert _counts(store) == {table: 0 for table in WRITTEN_TABLES}


def test_status_transitions(container, store, customer, admin, clock):
    vehicle = make_vehicle(store, customer)
    service = make_service(store)
    booking = container.bookings.create_booking(
        customer, vehicle.id, [service.id], clock() + timedelta(days=1), VALID_LOCATION
    )

    with pytest.raises(ValidationError):
        container.bookings.update_status(admin, booking.id, BookingStatus.completed)
    with pytest.raises(Unauthorized):
        container.bookings.update_status(customer, booking.id, BookingStatus.confirmed)

    container.bookings.update_status(admin, booking.id, BookingStatus.confirmed)
    container.bookings.update_status(admin, booking.id, BookingStatus.in_progress)
    completed = container.bookings.update_status(admin, booking.id, BookingStatus.completed)

    assert completed.completed_at == clock()
    assert container.bookings.completed_count(customer.id) == 1
    with pytest.raises(ValidationError):
        container.bookings.update_status(admin, booking.id, BookingStatus.cancelled)


def test_read_access(container, store, customer, admin, clock):
    vehicle = make_vehicle(store, customer)
    service = make_service(store)
    booking = container.bookings.create_booking(
        customer, vehicle.id, [service.id], clock() + timedelta(days=1), VALID_LOCATION
    )
    stranger = make_user(store, "stranger")
    detailer = make_user(store, "detailer", role=UserRole.detailer)

    details = container.bookings.get(customer, booking.id)
    assert details.vehicle.id == vehicle.id
    assert [s.id for s in details.services] == [service.id]

    with pytest.raises(InvariantViolation):
        container.bookings.get(stranger, booking.id)
    with pytest.raises(InvariantViolation):
        container.bookings.get(detailer, booking.id)

    container.bookings.assign_detailer(admin, booking.id, detailer.id)
    assert container.bookings.get(detailer, booking.id).booking.assigned_detailer_id == detailer.id

    assert [d.booking.id for d in container.bookings.list_mine(customer)] == [booking.id]
    assert container.bookings.list_mine(stranger) == []
    assert [b.id for b in container.bookings.list_all(admin, BookingStatus.pending)] == [booking.id]
    with pytest.raises(Unauthorized):
        container.bookings.list_all(customer)
