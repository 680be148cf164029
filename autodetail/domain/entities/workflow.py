from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from autodetail.domain.entities.timestamps import from_epoch, to_epoch


class WorkflowRunStatus(str, Enum):
    running = "running"
    completed = "completed"
    failed = "failed"
    cancelled = "cancelled"


class WorkflowStep(str, Enum):
    confirmation = "confirmation"
    reminder_wait = "reminder-wait"
    reminder = "reminder"
    scheduled_wait = "scheduled-wait"
    start_service = "start-service"
    service_duration = "service-duration"
    follow_up = "completion-follow-up"
    done = "done"


def workflow_id_for(booking_id: str) -> str:
    return f"booking-{booking_id}"


@dataclass(frozen=True)
class WorkflowState:
    """Observability mirror of a lifecycle run. Not used for resumption."""

    id: str
    workflow_id: str
    booking_id: str
    current_step: str
    status: WorkflowRunStatus
    started_at: datetime
    completed_at: datetime | None = None
    error: str | None = None
    tenant_id: str | None = None

    def to_document(self) -> dict[str, Any]:
        return {
            "workflow_id": self.workflow_id,
            "booking_id": self.booking_id,
            "tenant_id": self.tenant_id,
            "current_step": self.current_step,
            "status": self.status.value,
            "started_at": to_epoch(self.started_at),
            "completed_at": to_epoch(self.completed_at),
            "error": self.error,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "WorkflowState":
        return cls(
            id=doc["id"],
            workflow_id=doc["workflow_id"],
            booking_id=doc["booking_id"],
            tenant_id=doc.get("tenant_id"),
            current_step=doc["current_step"],
            status=WorkflowRunStatus(doc["status"]),
            started_at=from_epoch(doc["started_at"]),
            completed_at=from_epoch(doc.get("completed_at")),
            error=doc.get("error"),
        )


@dataclass(frozen=True)
class WorkflowCheckpoint:
    """
    Durable position of a lifecycle run.

    `step` is the next step to execute; `resume_at` is the earliest instant it
    may run. `completed_keys` holds the idempotency key of every side-effecting
    step already dispatched, so a resumed run never repeats one.
    """

    id: str  # equals the booking id
    workflow_id: str
    step: WorkflowStep
    status: WorkflowRunStatus = WorkflowRunStatus.running
    resume_at: datetime | None = None
    completed_keys: tuple[str, ...] = field(default_factory=tuple)
    error: str | None = None

    def key_for(self, step: WorkflowStep) -> str:
        return f"{self.workflow_id}:{step.value}"

    def has_completed(self, step: WorkflowStep) -> bool:
        return self.key_for(step) in self.completed_keys

    def to_document(self) -> dict[str, Any]:
        return {
            "workflow_id": self.workflow_id,
            "step": self.step.value,
            "status": self.status.value,
            "resume_at": to_epoch(self.resume_at),
            "completed_keys": list(self.completed_keys),
            "error": self.error,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "WorkflowCheckpoint":
        return cls(
            id=doc["id"],
            workflow_id=doc["workflow_id"],
            step=WorkflowStep(doc["step"]),
            status=WorkflowRunStatus(doc.get("status", "running")),
            resume_at=from_epoch(doc.get("resume_at")),
            completed_keys=tuple(doc.get("completed_keys") or ()),
            error=doc.get("error"),
        )
