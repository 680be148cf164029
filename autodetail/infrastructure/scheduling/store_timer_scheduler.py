from __future__ import annotations

from datetime import datetime

from autodetail.application.ports.document_store import SCHEDULED_TIMERS, DocumentStorePort
from autodetail.application.ports.scheduler import ScheduledTimer, WorkflowSchedulerPort
from autodetail.domain.entities.timestamps import from_epoch, to_epoch


class StoreTimerScheduler(WorkflowSchedulerPort):
    """
    Durable timers kept in the document store, one per booking.

    Nothing fires by itself: an external cadence calls `due()` (through the
    process-due-workflows job) and resumes what it returns.
    """

    def __init__(self, store: DocumentStorePort) -> None:
        self._store = store

    def resume_at(self, workflow_id: str, booking_id: str, run_at: datetime) -> None:
        self._store.put(
            SCHEDULED_TIMERS,
            booking_id,
            {"workflow_id": workflow_id, "booking_id": booking_id, "run_at": to_epoch(run_at)},
        )

    def cancel(self, booking_id: str) -> None:
        self._store.delete(SCHEDULED_TIMERS, booking_id)

    def due(self, now: datetime, limit: int = 100) -> list[ScheduledTimer]:
        cutoff = to_epoch(now)
        timers = []
        for doc in self._store.find_range(SCHEDULED_TIMERS, "run_at"):
            if doc["run_at"] > cutoff or len(timers) >= limit:
                break
            timers.append(
                ScheduledTimer(workflow_id=doc["workflow_id"], booking_id=doc["booking_id"], run_at=from_epoch(doc["run_at"]))
            )
        return timers

    def acknowledge(self, timer: ScheduledTimer) -> None:
        with self._store.transaction():
            doc = self._store.get(SCHEDULED_TIMERS, timer.booking_id)
            if doc is not None and doc["run_at"] == to_epoch(timer.run_at):
                self._store.delete(SCHEDULED_TIMERS, timer.booking_id)
