from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from autodetail.domain.entities.timestamps import from_epoch, to_epoch


@dataclass(frozen=True)
class Client:
    """Unauthenticated customer captured by a tenant's self-assessment intake."""

    id: str
    tenant_id: str
    email: str
    name: str
    phone: str
    created_at: datetime | None = None
    last_assessment_at: datetime | None = None

    def to_document(self) -> dict[str, Any]:
        return {
            "tenant_id": self.tenant_id,
            "email": self.email,
            "name": self.name,
            "phone": self.phone,
            "created_at": to_epoch(self.created_at),
            "last_assessment_at": to_epoch(self.last_assessment_at),
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Client":
        return cls(
            id=doc["id"],
            tenant_id=doc["tenant_id"],
            email=doc["email"],
            name=doc["name"],
            phone=doc.get("phone", ""),
            created_at=from_epoch(doc.get("created_at")),
            last_assessment_at=from_epoch(doc.get("last_assessment_at")),
        )
