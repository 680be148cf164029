from __future__ import annotations

import math

from autodetail.application.ports.document_store import PRICING_KNOWLEDGE, DocumentStorePort
from autodetail.application.ports.knowledge_store import KnowledgeStorePort
from autodetail.domain.entities.knowledge_item import KnowledgeCategory, KnowledgeItem, KnowledgeMatch


def cosine_similarity(a: list[float] | tuple[float, ...], b: list[float] | tuple[float, ...]) -> float:
    if len(a) != len(b):
        return 0.0
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


class VectorKnowledgeStore(KnowledgeStorePort):
    """Brute-force nearest neighbours over knowledge items kept in the document store."""

    def __init__(self, store: DocumentStorePort) -> None:
        self._store = store

    def add(self, item: KnowledgeItem) -> str:
        if item.id:
            self._store.put(PRICING_KNOWLEDGE, item.id, item.to_document())
            return item.id
        return self._store.insert(PRICING_KNOWLEDGE, item.to_document())

    def list_items(self, category: KnowledgeCategory | None = None) -> list[KnowledgeItem]:
        filters = {"category": category.value} if category is not None else {}
        return [KnowledgeItem.from_document(d) for d in self._store.find(PRICING_KNOWLEDGE, **filters)]

    def search(
        self,
        vector: list[float],
        limit: int = 5,
        category: KnowledgeCategory | None = None,
        tenant_id: str | None = None,
    ) -> list[KnowledgeMatch]:
        matches: list[KnowledgeMatch] = []
        for item in self.list_items(category):
            # Global items (no tenant) are visible to every tenant.
            if item.tenant_id is not None and item.tenant_id != tenant_id:
                continue
            matches.append(KnowledgeMatch(item=item, score=cosine_similarity(vector, item.embedding)))
        matches.sort(key=lambda m: m.score, reverse=True)
        return matches[:limit]
