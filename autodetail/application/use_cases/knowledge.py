from __future__ import annotations

import logging
from dataclasses import dataclass

from autodetail.application.ports.embedder import EmbedderPort
from autodetail.application.ports.knowledge_store import KnowledgeStorePort
from autodetail.domain.entities.knowledge_item import KnowledgeCategory, KnowledgeItem
from autodetail.domain.entities.timestamps import utcnow


@dataclass(frozen=True)
class KnowledgeSeed:
    content: str
    category: KnowledgeCategory
    source: str
    item_id: str = ""


class PricingKnowledgeUseCase:
    """Advisory retrieval over the pricing knowledge base. Never affects a price."""

    def __init__(
        self,
        embedder: EmbedderPort,
        knowledge: KnowledgeStorePort,
        search_limit: int = 5,
        insight_limit: int = 3,
    ) -> None:
        self._embedder = embedder
        self._knowledge = knowledge
        self._search_limit = search_limit
        self._insight_limit = insight_limit
        self._logger = logging.getLogger(__name__)

    def insights_for(self, query: str, tenant_id: str | None = None) -> list[str]:
        """
        Top snippets for a pricing context. Any retrieval failure yields an
        empty list so the numeric quote is never blocked.
        """
        try:
            vector = self._embedder.embed_query(query)
            matches = self._knowledge.search(vector, limit=self._search_limit, tenant_id=tenant_id)
        except Exception as e:
            self._logger.warning("Pricing insight lookup failed", extra={"error": str(e), "reason": query})
            return []
        return [m.item.content for m in matches][: self._insight_limit]

    def seed(self, seeds: list[KnowledgeSeed], tenant_id: str | None = None) -> int:
        if not seeds:
            return 0
        vectors = self._embedder.embed([s.content for s in seeds])
        now = utcnow()
        for seed, vector in zip(seeds, vectors):
            self._knowledge.add(
                KnowledgeItem(
                    id=seed.item_id,
                    content=seed.content,
                    category=seed.category,
                    embedding=tuple(vector),
                    source=seed.source,
                    last_updated=now,
                    relevance_score=1.0,
                    tenant_id=tenant_id,
                )
            )
        self._logger.info("Pricing knowledge seeded", extra={"reason": f"count={len(seeds)}"})
        return len(seeds)

    def has_items(self) -> bool:
        return bool(self._knowledge.list_items())
