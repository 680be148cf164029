from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from autodetail.application.authorization import Action, authorize
from autodetail.application.exceptions import NotFound
from autodetail.application.ports.document_store import CLIENTS, TENANTS, DocumentStorePort
from autodetail.application.utils.validation import validate_contact
from autodetail.domain.entities.client import Client
from autodetail.domain.entities.tenant import Tenant
from autodetail.domain.entities.timestamps import to_epoch, utcnow
from autodetail.domain.entities.user import User


class ClientsUseCase:
    """Walk-in customers of a tenant, keyed by (tenant, email)."""

    def __init__(self, store: DocumentStorePort, clock: Callable[[], datetime] = utcnow) -> None:
        self._store = store
        self._clock = clock

    def create_or_get(self, tenant_id: str, email: str, name: str, phone: str) -> Client:
        validate_contact(email, name, phone)
        email = email.strip().lower()
        if self._store.get(TENANTS, tenant_id) is None:
            raise NotFound(f"Tenant {tenant_id} not found")
        with self._store.transaction():
            existing = self._store.find(CLIENTS, tenant_id=tenant_id, email=email)
            if existing:
                return Client.from_document(existing[0])
            client = Client(
                id="",
                tenant_id=tenant_id,
                email=email,
                name=name.strip(),
                phone=phone,
                created_at=self._clock(),
            )
            client_id = self._store.insert(CLIENTS, client.to_document())
        return replace(client, id=client_id)

    def get(self, client_id: str) -> Client:
        doc = self._store.get(CLIENTS, client_id)
        if doc is None:
            raise NotFound(f"Client {client_id} not found")
        return Client.from_document(doc)

    def list_for_tenant(self, actor: User | None, tenant_id: str) -> list[Client]:
        doc = self._store.get(TENANTS, tenant_id)
        if doc is None:
            raise NotFound(f"Tenant {tenant_id} not found")
        authorize(actor, Action.tenant_read_private, Tenant.from_document(doc))
        clients = [Client.from_document(d) for d in self._store.find(CLIENTS, tenant_id=tenant_id)]
        return sorted(clients, key=lambda c: to_epoch(c.created_at) or 0.0, reverse=True)
