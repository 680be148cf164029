from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ScheduledTimer:
    workflow_id: str
    booking_id: str
    run_at: datetime


class WorkflowSchedulerPort(ABC):
    @abstractmethod
    def resume_at(self, workflow_id: str, booking_id: str, run_at: datetime) -> None:
        """Durably arrange for the workflow to be resumed at `run_at`. Replaces any earlier timer."""
        raise NotImplementedError

    def run_now(self, workflow_id: str, booking_id: str, now: datetime) -> None:
        self.resume_at(workflow_id, booking_id, now)

    @abstractmethod
    def cancel(self, booking_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def due(self, now: datetime, limit: int = 100) -> list[ScheduledTimer]:
        """Timers whose `run_at` is not after `now`, earliest first."""
        raise NotImplementedError

    @abstractmethod
    def acknowledge(self, timer: ScheduledTimer) -> None:
        """Drop a fired timer unless it has been replaced by a later one."""
        raise NotImplementedError
