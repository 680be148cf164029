from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import asdict, replace
from datetime import datetime, timedelta
from typing import Any

from autodetail.application.authorization import Action, authorize
from autodetail.application.exceptions import NotFound, ValidationError
from autodetail.application.ports.document_store import (
    ASSESSMENTS,
    BOOKINGS,
    CLIENTS,
    TENANTS,
    USERS,
    DocumentStorePort,
)
from autodetail.application.utils.money import round_display
from autodetail.application.utils.validation import location_errors, validate_contact, validate_slug
from autodetail.domain.entities.analytics import TenantStats
from autodetail.domain.entities.booking import BookingStatus
from autodetail.domain.entities.tenant import (
    Branding,
    Subscription,
    SubscriptionPlan,
    SubscriptionStatus,
    Tenant,
    TenantContact,
    TenantSettings,
)
from autodetail.domain.entities.timestamps import to_epoch, utcnow
from autodetail.domain.entities.user import User, UserRole

TRIAL_PERIOD = timedelta(days=30)
SETTINGS_FIELDS = {"allow_self_assessment", "require_vin", "auto_approve_bookings", "notification_email"}
BRANDING_FIELDS = {"logo", "primary_color", "secondary_color", "accent_color"}


class TenantsUseCase:
    def __init__(self, store: DocumentStorePort, clock: Callable[[], datetime] = utcnow) -> None:
        self._store = store
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    def create_tenant(
        self,
        actor: User | None,
        business_name: str,
        slug: str,
        contact: dict[str, Any],
        branding: dict[str, Any] | None = None,
    ) -> Tenant:
        """Onboard a business. The caller becomes its owner."""
        authorize(actor, Action.tenant_create)
        validate_slug(slug)
        validate_contact(contact.get("email"), business_name)
        errors = location_errors(contact)
        if errors:
            raise ValidationError(errors)

        now = self._clock()
        with self._store.transaction():
            if self._store.find(TENANTS, slug=slug):
                raise ValidationError({"slug": "Business slug already taken"})
            tenant = Tenant(
                id="",
                business_name=business_name.strip(),
                owner_subject=actor.subject,
                owner_email=actor.email,
                slug=slug,
                qr_code=f"{slug}-{int(to_epoch(now) * 1000)}",
                branding=Branding(**{k: v for k, v in (branding or {}).items() if k in BRANDING_FIELDS}),
                contact=TenantContact(
                    phone=contact.get("phone", ""),
                    email=contact["email"],
                    address=contact["address"],
                    city=contact["city"],
                    state=contact["state"],
                    zip_code=contact["zip_code"],
                ),
                settings=TenantSettings(notification_email=contact["email"]),
                subscription=Subscription(
                    plan=SubscriptionPlan.free,
                    status=SubscriptionStatus.active,
                    current_period_end=now + TRIAL_PERIOD,
                ),
                created_at=now,
            )
            tenant_id = self._store.insert(TENANTS, tenant.to_document())
            self._store.patch(USERS, actor.id, {"role": UserRole.tenant_owner.value, "tenant_id": tenant_id})

        self._logger.info("Tenant created", extra={"tenant_id": tenant_id, "reason": slug})
        return replace(tenant, id=tenant_id)

    def require(self, tenant_id: str) -> Tenant:
        doc = self._store.get(TENANTS, tenant_id)
        if doc is None:
            raise NotFound(f"Tenant {tenant_id} not found")
        return Tenant.from_document(doc)

    def _find_one(self, **equals: Any) -> Tenant | None:
        docs = self._store.find(TENANTS, **equals)
        return Tenant.from_document(docs[0]) if docs else None

    def get_by_slug(self, slug: str) -> Tenant | None:
        return self._find_one(slug=slug)

    def get_by_qr_code(self, qr_code: str) -> Tenant | None:
        return self._find_one(qr_code=qr_code)

    def my_tenant(self, actor: User | None) -> Tenant | None:
        if actor is None or actor.tenant_id is None:
            return None
        doc = self._store.get(TENANTS, actor.tenant_id)
        return Tenant.from_document(doc) if doc else None

    def update_settings(
        self,
        actor: User | None,
        tenant_id: str,
        settings: dict[str, Any] | None = None,
        branding: dict[str, Any] | None = None,
    ) -> Tenant:
        """Merge settings and branding changes. Only the owner may do this."""
        tenant = self.require(tenant_id)
        authorize(actor, Action.tenant_update, tenant)

        if settings:
            unknown = set(settings) - SETTINGS_FIELDS
            if unknown:
                raise ValidationError({f"settings.{k}": "Unknown setting" for k in sorted(unknown)})
            tenant = tenant.with_settings(**settings)
        if branding:
            unknown = set(branding) - BRANDING_FIELDS
            if unknown:
                raise ValidationError({f"branding.{k}": "Unknown branding field" for k in sorted(unknown)})
            tenant = replace(tenant, branding=replace(tenant.branding, **branding))

        doc = tenant.to_document()
        self._store.patch(TENANTS, tenant_id, {"settings": doc["settings"], "branding": doc["branding"]})
        return tenant

    def tenant_stats(self, actor: User | None, tenant_id: str) -> TenantStats:
        tenant = self.require(tenant_id)
        authorize(actor, Action.tenant_read_private, tenant)

        assessments = self._store.find(ASSESSMENTS, tenant_id=tenant_id)
        bookings = self._store.find(BOOKINGS, tenant_id=tenant_id)
        clients = self._store.find(CLIENTS, tenant_id=tenant_id)
        completed = [b for b in bookings if b["status"] == BookingStatus.completed.value]

        conversion = 0.0
        if assessments:
            conversion = round_display(len(bookings) / len(assessments) * 100)
        return TenantStats(
            total_assessments=len(assessments),
            total_bookings=len(bookings),
            total_clients=len(clients),
            completed_bookings=len(completed),
            total_revenue=sum(int(b["total_price"]) for b in completed),
            conversion_rate=conversion,
        )

    def public_profile(self, tenant: Tenant) -> dict[str, Any]:
        """Fields safe to show on the QR landing page."""
        return {
            "id": tenant.id,
            "business_name": tenant.business_name,
            "slug": tenant.slug,
            "branding": asdict(tenant.branding),
            "contact": asdict(tenant.contact),
            "allow_self_assessment": tenant.settings.allow_self_assessment,
            "require_vin": tenant.settings.require_vin,
        }
