from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from typing import Any

from autodetail.application.authorization import Action, authorize
from autodetail.application.exceptions import NotFound
from autodetail.application.ports.document_store import VEHICLES, DocumentStorePort
from autodetail.application.utils.validation import validate_vehicle_fields
from autodetail.domain.entities.timestamps import utcnow
from autodetail.domain.entities.user import User
from autodetail.domain.entities.vehicle import Vehicle, VehicleType

EDITABLE_FIELDS = {"make", "model", "year", "color", "vehicle_type", "license_plate", "notes"}


class VehiclesUseCase:
    def __init__(self, store: DocumentStorePort, clock: Callable[[], datetime] = utcnow) -> None:
        self._store = store
        self._clock = clock

    def add(self, actor: User | None, fields: dict[str, Any]) -> Vehicle:
        authorize(actor, Action.vehicle_create)
        validate_vehicle_fields(fields, self._clock())
        vehicle = Vehicle(
            id="",
            user_id=actor.id,
            tenant_id=actor.tenant_id,
            make=fields["make"].strip(),
            model=fields["model"].strip(),
            year=fields["year"],
            color=fields["color"].strip(),
            vehicle_type=VehicleType(fields["vehicle_type"]),
            license_plate=fields.get("license_plate"),
            notes=fields.get("notes"),
        )
        vehicle_id = self._store.insert(VEHICLES, vehicle.to_document())
        return replace(vehicle, id=vehicle_id)

    def list_mine(self, actor: User | None) -> list[Vehicle]:
        authorize(actor, Action.vehicle_create)
        return [Vehicle.from_document(d) for d in self._store.find(VEHICLES, user_id=actor.id)]

    def require(self, vehicle_id: str) -> Vehicle:
        doc = self._store.get(VEHICLES, vehicle_id)
        if doc is None:
            raise NotFound(f"Vehicle {vehicle_id} not found")
        return Vehicle.from_document(doc)

    def get(self, actor: User | None, vehicle_id: str) -> Vehicle:
        vehicle = self.require(vehicle_id)
        authorize(actor, Action.vehicle_access, vehicle)
        return vehicle

    def update(self, actor: User | None, vehicle_id: str, changes: dict[str, Any]) -> Vehicle:
        vehicle = self.get(actor, vehicle_id)
        changes = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
        validate_vehicle_fields(changes, self._clock(), partial=True)
        if "vehicle_type" in changes:
            changes["vehicle_type"] = VehicleType(changes["vehicle_type"])
        updated = replace(vehicle, **changes)
        self._store.patch(VEHICLES, vehicle_id, updated.to_document())
        return updated

    def delete(self, actor: User | None, vehicle_id: str) -> None:
        self.get(actor, vehicle_id)
        self._store.delete(VEHICLES, vehicle_id)
