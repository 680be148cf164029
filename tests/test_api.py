"""
HTTP surface tests against an in-memory container.
"""

from __future__ import annotations

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from autodetail.domain.entities.user import UserRole
from autodetail.main import app
from autodetail.wiring.dependencies import get_container

from conftest import VALID_LOCATION, make_service, make_user

CUSTOMER = {"X-Auth-Subject": "auth0|customer", "X-Auth-Email": "sam@example.com", "X-Auth-Name": "Sam"}
VEHICLE = {"make": "Honda", "model": "Civic", "year": 2020, "color": "Blue", "vehicle_type": "sedan"}


@pytest.fixture
def client(container):
    app.dependency_overrides[get_container] = lambda: container
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_list_services(client, store):
    make_service(store, name="Express Exterior Wash")
    make_service(store, name="Interior Deep Clean")

    response = client.get("/services")

    assert response.status_code == 200
    assert [s["name"] for s in response.json()] == ["Express Exterior Wash", "Interior Deep Clean"]
    assert client.get("/services/missing").status_code == 404


def test_anonymous_quote(client, store):
    service = make_service(store, base_price=100)

    response = client.post(
        "/pricing/quote",
        json={"service_ids": [service.id], "vehicle_type": "sedan", "scheduled_at": "2026-06-13T15:00:00-07:00"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["final_price"] == 152
    assert body["loyalty_discount"] == 0.0
    assert body["steps"]["after_demand"] == 115


def test_empty_quote_can_be_rejected(client):
    response = client.post(
        "/pricing/quote",
        json={"service_ids": [], "vehicle_type": "sedan", "scheduled_at": "2026-06-13T15:00:00Z", "require_nonzero": True},
    )

    assert response.status_code == 422
    assert "services" in response.json()["errors"]


def test_protected_routes_need_identity(client):
    assert client.get("/vehicles").status_code == 401
    assert client.get("/me").status_code == 401
    assert client.post("/bookings", json={}).status_code == 401


def test_first_request_registers_customer(client):
    response = client.get("/me", headers=CUSTOMER)

    assert response.status_code == 200
    assert response.json()["role"] == "customer"
    assert response.json()["email"] == "sam@example.com"


def test_book_and_follow_workflow(client, store, notifier, clock):
    service = make_service(store, base_price=100)
    vehicle = client.post("/vehicles", json=VEHICLE, headers=CUSTOMER)
    assert vehicle.status_code == 201

    response = client.post(
        "/bookings",
        json={
            "vehicle_id": vehicle.json()["id"],
            "service_ids": [service.id],
            "scheduled_at": (clock() + timedelta(days=3)).isoformat(),
            "location": VALID_LOCATION,
        },
        headers=CUSTOMER,
    )

    assert response.status_code == 201
    booking = response.json()
    assert booking["status"] == "pending"
    assert booking["total_price"] == booking["pricing_factors"]["final_price"]

    workflow = client.get(f"/bookings/{booking['id']}/workflow", headers=CUSTOMER)
    assert workflow.status_code == 200
    assert workflow.json()["current_step"] == "reminder-wait"
    assert workflow.json()["status"] == "running"
    assert notifier.kinds == ["booking-confirmation"]

    mine = client.get("/bookings/mine", headers=CUSTOMER)
    assert [d["booking"]["id"] for d in mine.json()] == [booking["id"]]
    assert mine.json()[0]["vehicle"]["make"] == "Honda"


def test_booking_validation_errors(client, store, clock):
    service = make_service(store)
    vehicle = client.post("/vehicles", json=VEHICLE, headers=CUSTOMER).json()

    response = client.post(
        "/bookings",
        json={
            "vehicle_id": vehicle["id"],
            "service_ids": [service.id],
            "scheduled_at": (clock() + timedelta(days=1)).isoformat(),
            "location": {**VALID_LOCATION, "zip_code": "ABCDE"},
        },
        headers=CUSTOMER,
    )

    assert response.status_code == 422
    assert response.json()["errors"] == {"zip_code": "Valid ZIP code is required"}


def test_other_customers_booking_is_forbidden(client, store, clock):
    service = make_service(store)
    vehicle = client.post("/vehicles", json=VEHICLE, headers=CUSTOMER).json()
    booking = client.post(
        "/bookings",
        json={
            "vehicle_id": vehicle["id"],
            "service_ids": [service.id],
            "scheduled_at": (clock() + timedelta(days=1)).isoformat(),
            "location": VALID_LOCATION,
        },
        headers=CUSTOMER,
    ).json()

    intruder = {"X-Auth-Subject": "auth0|intruder"}
    assert client.get(f"/bookings/{booking['id']}", headers=intruder).status_code == 403
    assert client.get(f"/vehicles/{vehicle['id']}", headers=intruder).status_code == 403


def test_jobs_endpoint_is_admin_only(client, store):
    make_user(store, "auth0|admin", role=UserRole.admin)

    assert client.get("/internal/jobs", headers=CUSTOMER).status_code == 403

    listed = client.get("/internal/jobs", headers={"X-Auth-Subject": "auth0|admin"})
    assert listed.status_code == 200
    assert "process-due-workflows" in {job["name"] for job in listed.json()}

    ran = client.post("/internal/jobs/process-due-workflows", headers={"X-Auth-Subject": "auth0|admin"})
    assert ran.status_code == 200
    assert ran.json()["result"] == {"resumed": 0}
