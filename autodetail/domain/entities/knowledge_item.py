from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from autodetail.domain.entities.timestamps import from_epoch, to_epoch


class KnowledgeCategory(str, Enum):
    market_trends = "market-trends"
    seasonal_factors = "seasonal-factors"
    competition = "competition"
    service_costs = "service-costs"
    customer_behavior = "customer-behavior"


@dataclass(frozen=True)
class KnowledgeItem:
    id: str
    content: str
    category: KnowledgeCategory
    embedding: tuple[float, ...]
    source: str
    last_updated: datetime
    relevance_score: float = 1.0
    tenant_id: str | None = None

    def to_document(self) -> dict[str, Any]:
        return {
            "tenant_id": self.tenant_id,
            "content": self.content,
            "category": self.category.value,
            "embedding": list(self.embedding),
            "metadata": {
                "source": self.source,
                "last_updated": to_epoch(self.last_updated),
                "relevance_score": self.relevance_score,
            },
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "KnowledgeItem":
        metadata = doc.get("metadata") or {}
        return cls(
            id=doc["id"],
            tenant_id=doc.get("tenant_id"),
            content=doc["content"],
            category=KnowledgeCategory(doc["category"]),
            embedding=tuple(float(x) for x in doc.get("embedding") or ()),
            source=metadata.get("source", ""),
            last_updated=from_epoch(metadata.get("last_updated") or 0.0),
            relevance_score=float(metadata.get("relevance_score", 1.0)),
        )


@dataclass(frozen=True)
class KnowledgeMatch:
    item: KnowledgeItem
    score: float
