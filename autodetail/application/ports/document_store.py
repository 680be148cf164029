from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any

USERS = "users"
TENANTS = "tenants"
CLIENTS = "clients"
VEHICLES = "vehicles"
SERVICES = "services"
BOOKINGS = "bookings"
PRICING_HISTORY = "pricing_history"
PRICING_KNOWLEDGE = "pricing_knowledge"
ASSESSMENTS = "assessments"
WORKFLOW_STATES = "workflow_states"
WORKFLOW_CHECKPOINTS = "workflow_checkpoints"
SCHEDULED_TIMERS = "scheduled_timers"
ANALYTICS = "analytics"


class DocumentStorePort(ABC):
    """
    Hosted document database as seen by the core.

    Documents are plain dicts; every returned document carries its `id`.
    Returned documents are copies, mutating them never changes the store.
    """

    @abstractmethod
    def get(self, table: str, doc_id: str) -> dict[str, Any] | None:
        raise NotImplementedError

    @abstractmethod
    def insert(self, table: str, doc: dict[str, Any], doc_id: str | None = None) -> str:
        """Insert a new document. Returns its id (generated when not given)."""
        raise NotImplementedError

    @abstractmethod
    def put(self, table: str, doc_id: str, doc: dict[str, Any]) -> None:
        """Insert or fully replace the document stored under `doc_id`."""
        raise NotImplementedError

    @abstractmethod
    def patch(self, table: str, doc_id: str, changes: dict[str, Any]) -> bool:
        """Merge `changes` into a document. Returns False if it does not exist."""
        raise NotImplementedError

    @abstractmethod
    def compare_and_patch(
        self,
        table: str,
        doc_id: str,
        field: str,
        expected: Any,
        changes: dict[str, Any],
    ) -> bool:
        """Apply `changes` only if `field` still equals `expected`. Returns True if applied."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, table: str, doc_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def find(self, table: str, **equals: Any) -> list[dict[str, Any]]:
        """Equality scan. No filters returns the whole table."""
        raise NotImplementedError

    @abstractmethod
    def find_range(
        self,
        table: str,
        field: str,
        start: Any | None = None,
        end: Any | None = None,
    ) -> list[dict[str, Any]]:
        """Range scan over `field` with `start <= value < end`, ordered by `field`."""
        raise NotImplementedError

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """All writes inside the block are applied together or not at all."""
        raise NotImplementedError
