from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any

from autodetail.domain.entities.timestamps import from_epoch, to_epoch


class SubscriptionPlan(str, Enum):
    free = "free"
    starter = "starter"
    professional = "professional"
    enterprise = "enterprise"


class SubscriptionStatus(str, Enum):
    active = "active"
    cancelled = "cancelled"
    past_due = "past_due"


@dataclass(frozen=True)
class Branding:
    primary_color: str = "#0066CC"
    secondary_color: str = "#00CCCC"
    accent_color: str = "#FF6B35"
    logo: str | None = None


@dataclass(frozen=True)
class TenantContact:
    phone: str
    email: str
    address: str
    city: str
    state: str
    zip_code: str


@dataclass(frozen=True)
class TenantSettings:
    notification_email: str
    allow_self_assessment: bool = True
    require_vin: bool = False
    auto_approve_bookings: bool = False


@dataclass(frozen=True)
class Subscription:
    current_period_end: datetime
    plan: SubscriptionPlan = SubscriptionPlan.free
    status: SubscriptionStatus = SubscriptionStatus.active


@dataclass(frozen=True)
class Tenant:
    id: str
    business_name: str
    owner_subject: str
    owner_email: str
    slug: str
    qr_code: str
    contact: TenantContact
    settings: TenantSettings
    subscription: Subscription
    branding: Branding = field(default_factory=Branding)
    is_active: bool = True
    created_at: datetime | None = None

    def with_settings(self, **changes: Any) -> "Tenant":
        return replace(self, settings=replace(self.settings, **changes))

    def to_document(self) -> dict[str, Any]:
        return {
            "business_name": self.business_name,
            "owner_subject": self.owner_subject,
            "owner_email": self.owner_email,
            "slug": self.slug,
            "qr_code": self.qr_code,
            "branding": {
                "logo": self.branding.logo,
                "primary_color": self.branding.primary_color,
                "secondary_color": self.branding.secondary_color,
                "accent_color": self.branding.accent_color,
            },
            "contact": {
                "phone": self.contact.phone,
                "email": self.contact.email,
                "address": self.contact.address,
                "city": self.contact.city,
                "state": self.contact.state,
                "zip_code": self.contact.zip_code,
            },
            "settings": {
                "allow_self_assessment": self.settings.allow_self_assessment,
                "require_vin": self.settings.require_vin,
                "auto_approve_bookings": self.settings.auto_approve_bookings,
                "notification_email": self.settings.notification_email,
            },
            "subscription": {
                "plan": self.subscription.plan.value,
                "status": self.subscription.status.value,
                "current_period_end": to_epoch(self.subscription.current_period_end),
            },
            "is_active": self.is_active,
            "created_at": to_epoch(self.created_at),
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Tenant":
        branding = doc.get("branding") or {}
        contact = doc["contact"]
        tenant_settings = doc["settings"]
        subscription = doc["subscription"]
        return cls(
            id=doc["id"],
            business_name=doc["business_name"],
            owner_subject=doc["owner_subject"],
            owner_email=doc.get("owner_email", ""),
            slug=doc["slug"],
            qr_code=doc["qr_code"],
            branding=Branding(
                logo=branding.get("logo"),
                primary_color=branding.get("primary_color", "#0066CC"),
                secondary_color=branding.get("secondary_color", "#00CCCC"),
                accent_color=branding.get("accent_color", "#FF6B35"),
            ),
            contact=TenantContact(**contact),
            settings=TenantSettings(**tenant_settings),
            subscription=Subscription(
                plan=SubscriptionPlan(subscription["plan"]),
                status=SubscriptionStatus(subscription["status"]),
                current_period_end=from_epoch(subscription["current_period_end"]),
            ),
            is_active=bool(doc.get("is_active", True)),
            created_at=from_epoch(doc.get("created_at")),
        )
