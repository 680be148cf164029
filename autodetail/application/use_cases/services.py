from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from autodetail.application.authorization import Action, authorize
from autodetail.application.exceptions import NotFound
from autodetail.application.ports.document_store import SERVICES, DocumentStorePort
from autodetail.application.utils.validation import validate_service_fields
from autodetail.domain.entities.service import Service, ServiceCategory, normalize_multipliers
from autodetail.domain.entities.user import User

EDITABLE_FIELDS = {"name", "description", "base_price", "duration_minutes", "is_active", "vehicle_type_multipliers"}


class ServiceCatalogUseCase:
    """Operator-managed service catalog. Services are deactivated, never deleted."""

    def __init__(self, store: DocumentStorePort) -> None:
        self._store = store
        self._logger = logging.getLogger(__name__)

    def _load(self, doc: dict[str, Any]) -> Service:
        service = Service.from_document(doc)
        if service.missing_multipliers:
            self._logger.warning(
                "Service multiplier table incomplete, defaulting to 1.0",
                extra={
                    "service": service.id,
                    "reason": ",".join(t.value for t in service.missing_multipliers),
                },
            )
        return service

    def get(self, service_id: str) -> Service | None:
        doc = self._store.get(SERVICES, service_id)
        return self._load(doc) if doc else None

    def require(self, service_id: str) -> Service:
        service = self.get(service_id)
        if service is None:
            raise NotFound(f"Service {service_id} not found")
        return service

    def get_many(self, service_ids: list[str]) -> list[Service]:
        """Resolve services in the given order. Raises NotFound for any unknown id."""
        return [self.require(service_id) for service_id in service_ids]

    def list_active(self, tenant_id: str | None = None) -> list[Service]:
        filters: dict[str, Any] = {"is_active": True}
        if tenant_id is not None:
            filters["tenant_id"] = tenant_id
        return sorted((self._load(d) for d in self._store.find(SERVICES, **filters)), key=lambda s: s.name)

    def list_by_category(self, category: ServiceCategory, tenant_id: str | None = None) -> list[Service]:
        return [s for s in self.list_active(tenant_id) if s.category == category]

    def create(self, actor: User | None, fields: dict[str, Any]) -> Service:
        authorize(actor, Action.service_manage)
        validate_service_fields(fields)
        multipliers, missing = normalize_multipliers(fields.get("vehicle_type_multipliers"))
        if missing:
            self._logger.warning(
                "New service is missing vehicle multipliers, filled with 1.0",
                extra={"service": fields.get("name"), "reason": ",".join(t.value for t in missing)},
            )

        tenant_id = fields.get("tenant_id")
        if actor is not None and actor.tenant_id is not None:
            tenant_id = actor.tenant_id

        service = Service(
            id="",
            name=fields["name"].strip(),
            description=fields["description"].strip(),
            category=ServiceCategory(fields["category"]),
            base_price=fields["base_price"],
            duration_minutes=fields["duration_minutes"],
            is_active=True,
            vehicle_type_multipliers=multipliers,
            tenant_id=tenant_id,
        )
        service_id = self._store.insert(SERVICES, service.to_document())
        self._logger.info("Service created", extra={"service": service_id})
        return replace(service, id=service_id)

    def update(self, actor: User | None, service_id: str, changes: dict[str, Any]) -> Service:
        current = self.require(service_id)
        authorize(actor, Action.service_manage, current)

        updates = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS and v is not None}
        validate_service_fields(updates, partial=True)

        if "vehicle_type_multipliers" in updates:
            merged = {k.value: v for k, v in current.vehicle_type_multipliers.items()}
            merged.update({str(k): float(v) for k, v in dict(updates["vehicle_type_multipliers"]).items()})
            table, _ = normalize_multipliers(merged)
            updates["vehicle_type_multipliers"] = {k.value: v for k, v in table.items()}
        for key in ("name", "description"):
            if key in updates:
                updates[key] = updates[key].strip()

        self._store.patch(SERVICES, service_id, updates)
        self._logger.info("Service updated", extra={"service": service_id})
        return self.require(service_id)

    def deactivate(self, actor: User | None, service_id: str) -> Service:
        return self.update(actor, service_id, {"is_active": False})

    def seed(self, catalog: list[dict[str, Any]], tenant_id: str | None = None) -> int:
        """Insert catalog entries whose name is not present yet. Returns how many were added."""
        existing = {d["name"] for d in self._store.find(SERVICES)}
        added = 0
        with self._store.transaction():
            for fields in catalog:
                if fields["name"] in existing:
                    continue
                validate_service_fields(fields)
                multipliers, _ = normalize_multipliers(fields.get("vehicle_type_multipliers"))
                service = Service(
                    id="",
                    name=fields["name"],
                    description=fields["description"],
                    category=ServiceCategory(fields["category"]),
                    base_price=fields["base_price"],
                    duration_minutes=fields["duration_minutes"],
                    vehicle_type_multipliers=multipliers,
                    tenant_id=tenant_id,
                )
                self._store.insert(SERVICES, service.to_document())
                added += 1
        self._logger.info("Service catalog seeded", extra={"reason": f"added={added}"})
        return added
