from __future__ import annotations

from abc import ABC, abstractmethod

from autodetail.domain.entities.knowledge_item import KnowledgeCategory, KnowledgeItem, KnowledgeMatch


class KnowledgeStorePort(ABC):
    @abstractmethod
    def add(self, item: KnowledgeItem) -> str:
        """Store `item`. An item with an id replaces the one stored under it."""
        raise NotImplementedError

    @abstractmethod
    def search(
        self,
        vector: list[float],
        limit: int = 5,
        category: KnowledgeCategory | None = None,
        tenant_id: str | None = None,
    ) -> list[KnowledgeMatch]:
        """Nearest neighbours of `vector`, best first, optionally filtered by category and tenant."""
        raise NotImplementedError

    @abstractmethod
    def list_items(self, category: KnowledgeCategory | None = None) -> list[KnowledgeItem]:
        raise NotImplementedError
