from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from autodetail.application.ports.document_store import SERVICES, USERS, VEHICLES
from autodetail.application.ports.notifier import BookingNotification, NotifierPort
from autodetail.domain.entities.service import Service, ServiceCategory, normalize_multipliers
from autodetail.domain.entities.user import User, UserRole
from autodetail.domain.entities.vehicle import Vehicle, VehicleType
from autodetail.infrastructure.embeddings.hashing_embedder import HashingEmbedder
from autodetail.infrastructure.store.memory_store import MemoryDocumentStore
from autodetail.wiring.dependencies import build_container

VALID_LOCATION = {"address": "123 Main Street", "city": "Portland", "state": "OR", "zip_code": "97201"}


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> datetime:
        self.now = self.now + delta
        return self.now

    def set(self, value: datetime) -> datetime:
        self.now = value
        return self.now


class RecordingNotifier(NotifierPort):
    def __init__(self) -> None:
        self.sent: list[BookingNotification] = []

    def send(self, notification: BookingNotification) -> None:
        self.sent.append(notification)

    @property
    def kinds(self) -> list[str]:
        return [n.kind.value for n in self.sent]


def make_user(
    store,
    subject: str,
    role: UserRole = UserRole.customer,
    tenant_id: str | None = None,
    email: str | None = None,
) -> User:
    user = User(
        id="",
        subject=subject,
        email=email or f"{subject}@example.com",
        name=subject.title(),
        role=role,
        tenant_id=tenant_id,
    )
    user_id = store.insert(USERS, user.to_document())
    return replace(user, id=user_id)


def make_service(
    store,
    name: str = "Express Exterior Wash",
    base_price: int = 100,
    duration_minutes: int = 60,
    multipliers: dict[str, float] | None = None,
    tenant_id: str | None = None,
) -> Service:
    table, _ = normalize_multipliers(multipliers if multipliers is not None else {t.value: 1.0 for t in VehicleType})
    service = Service(
        id="",
        name=name,
        description="A thorough detailing service for testing.",
        category=ServiceCategory.exterior,
        base_price=base_price,
        duration_minutes=duration_minutes,
        vehicle_type_multipliers=table,
        tenant_id=tenant_id,
    )
    service_id = store.insert(SERVICES, service.to_document())
    return replace(service, id=service_id)


def make_vehicle(store, owner: User, vehicle_type: VehicleType = VehicleType.sedan) -> Vehicle:
    vehicle = Vehicle(
        id="",
        user_id=owner.id,
        make="Honda",
        model="Civic",
        year=2020,
        color="Blue",
        vehicle_type=vehicle_type,
    )
    vehicle_id = store.insert(VEHICLES, vehicle.to_document())
    return replace(vehicle, id=vehicle_id)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def container(store, notifier, clock):
    return build_container(store=store, notifier=notifier, embedder=HashingEmbedder(), clock=clock)
