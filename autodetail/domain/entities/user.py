from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from autodetail.domain.entities.timestamps import from_epoch, to_epoch


class UserRole(str, Enum):
    customer = "customer"
    admin = "admin"
    detailer = "detailer"
    tenant_owner = "tenant-owner"
    tenant_admin = "tenant-admin"


@dataclass(frozen=True)
class Identity:
    """Verified caller as supplied by the identity provider."""

    subject: str
    email: str = ""
    name: str = ""
    phone: str | None = None


@dataclass(frozen=True)
class User:
    id: str
    subject: str
    email: str
    name: str
    role: UserRole = UserRole.customer
    phone: str | None = None
    tenant_id: str | None = None
    created_at: datetime | None = None

    def to_document(self) -> dict[str, Any]:
        return {
            "subject": self.subject,
            "email": self.email,
            "name": self.name,
            "phone": self.phone,
            "role": self.role.value,
            "tenant_id": self.tenant_id,
            "created_at": to_epoch(self.created_at),
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "User":
        return cls(
            id=doc["id"],
            subject=doc["subject"],
            email=doc.get("email", ""),
            name=doc.get("name", ""),
            phone=doc.get("phone"),
            role=UserRole(doc.get("role", "customer")),
            tenant_id=doc.get("tenant_id"),
            created_at=from_epoch(doc.get("created_at")),
        )
