"""
Booking lifecycle workflow as a persisted state machine.

A run is a `WorkflowCheckpoint` stored under the booking id. `advance()`
executes every step whose `resume_at` has passed, writes the new checkpoint
after each step, and arranges a durable timer for the next suspension. Any
process may call `advance()` for any booking at any time: steps already
recorded in `completed_keys` are never dispatched again.

    confirmation -> reminder-wait -> [reminder] -> scheduled-wait
        -> start-service (confirmed -> in-progress) -> completion-follow-up -> done
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta

from autodetail.application.exceptions import WorkflowStepError
from autodetail.application.ports.document_store import (
    BOOKINGS,
    CLIENTS,
    SERVICES,
    USERS,
    WORKFLOW_CHECKPOINTS,
    WORKFLOW_STATES,
    DocumentStorePort,
)
from autodetail.application.ports.notifier import BookingNotification, NotificationKind, NotifierPort
from autodetail.application.ports.scheduler import WorkflowSchedulerPort
from autodetail.domain.entities.booking import Booking, BookingStatus
from autodetail.domain.entities.timestamps import to_epoch, utcnow
from autodetail.domain.entities.workflow import (
    WorkflowCheckpoint,
    WorkflowRunStatus,
    WorkflowState,
    WorkflowStep,
    workflow_id_for,
)

# Label shown on WorkflowState while a run is suspended before a step.
WAIT_LABELS = {
    WorkflowStep.reminder: WorkflowStep.reminder_wait,
    WorkflowStep.start_service: WorkflowStep.scheduled_wait,
    WorkflowStep.follow_up: WorkflowStep.service_duration,
}

NOTIFYING_STEPS = {
    WorkflowStep.confirmation: NotificationKind.confirmation,
    WorkflowStep.reminder: NotificationKind.reminder,
    WorkflowStep.follow_up: NotificationKind.follow_up,
}

MAX_STEPS_PER_ADVANCE = len(WorkflowStep) + 1


class BookingLifecycleWorkflow:
    def __init__(
        self,
        store: DocumentStorePort,
        notifier: NotifierPort,
        scheduler: WorkflowSchedulerPort,
        clock: Callable[[], datetime] = utcnow,
        reminder_lead: timedelta = timedelta(hours=24),
        service_buffer: timedelta = timedelta(minutes=30),
        default_service_minutes: int = 60,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._scheduler = scheduler
        self._clock = clock
        self._reminder_lead = reminder_lead
        self._service_buffer = service_buffer
        self._default_service_minutes = default_service_minutes
        self._locks: dict[str, threading.Lock] = {}
        self._lock_lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def _get_lock(self, booking_id: str) -> threading.Lock:
        with self._lock_lock:
            if booking_id not in self._locks:
                self._locks[booking_id] = threading.Lock()
            return self._locks[booking_id]

    def _release_lock(self, booking_id: str) -> None:
        with self._lock_lock:
            self._locks.pop(booking_id, None)

    # -- scheduling -----------------------------------------------------

    def schedule(self, booking: Booking, now: datetime | None = None) -> WorkflowState:
        """
        Register a new run for `booking`. Meant to be called inside the
        transaction that creates the booking.
        """
        now = now or self._clock()
        workflow_id = workflow_id_for(booking.id)
        state = WorkflowState(
            id="",
            workflow_id=workflow_id,
            booking_id=booking.id,
            tenant_id=booking.tenant_id,
            current_step=WorkflowStep.confirmation.value,
            status=WorkflowRunStatus.running,
            started_at=now,
        )
        state_id = self._store.insert(WORKFLOW_STATES, state.to_document())
        checkpoint = WorkflowCheckpoint(id=booking.id, workflow_id=workflow_id, step=WorkflowStep.confirmation)
        self._store.put(WORKFLOW_CHECKPOINTS, booking.id, checkpoint.to_document())
        self._scheduler.run_now(workflow_id, booking.id, now)
        return replace(state, id=state_id)

    def get_checkpoint(self, booking_id: str) -> WorkflowCheckpoint | None:
        doc = self._store.get(WORKFLOW_CHECKPOINTS, booking_id)
        return WorkflowCheckpoint.from_document(doc) if doc else None

    def get_state(self, booking_id: str) -> WorkflowState | None:
        docs = self._store.find(WORKFLOW_STATES, booking_id=booking_id)
        return WorkflowState.from_document(docs[0]) if docs else None

    # -- execution ------------------------------------------------------

    def advance(self, booking_id: str, now: datetime | None = None) -> WorkflowCheckpoint | None:
        """Run every step that is due. Returns the checkpoint the run stopped at."""
        with self._get_lock(booking_id):
            checkpoint = self._advance_locked(booking_id, now or self._clock())
        # Terminal runs drop their lock entry.
        if checkpoint is None or checkpoint.status != WorkflowRunStatus.running:
            self._release_lock(booking_id)
        return checkpoint

    def _advance_locked(self, booking_id: str, now: datetime) -> WorkflowCheckpoint | None:
        checkpoint = self.get_checkpoint(booking_id)

        for _ in range(MAX_STEPS_PER_ADVANCE):
            if checkpoint is None or checkpoint.status != WorkflowRunStatus.running:
                return checkpoint
            if checkpoint.resume_at is not None and checkpoint.resume_at > now:
                self._scheduler.resume_at(checkpoint.workflow_id, booking_id, checkpoint.resume_at)
                return checkpoint

            try:
                checkpoint = self._run_step(booking_id, checkpoint, now)
            except Exception as e:
                return self._fail(booking_id, checkpoint, e, now)

            self._store.put(WORKFLOW_CHECKPOINTS, booking_id, checkpoint.to_document())
            self._mirror(booking_id, checkpoint, now)

        return checkpoint

    def _run_step(self, booking_id: str, checkpoint: WorkflowCheckpoint, now: datetime) -> WorkflowCheckpoint:
        step = checkpoint.step
        self._logger.info("Workflow step", extra={"booking_id": booking_id, "workflow_step": step.value})
        booking = self._require_booking(booking_id)

        if step in NOTIFYING_STEPS:
            if booking.status == BookingStatus.cancelled:
                return self._end_cancelled(checkpoint)
            if not checkpoint.has_completed(step):
                self._dispatch(NOTIFYING_STEPS[step], booking)
                checkpoint = replace(
                    checkpoint, completed_keys=checkpoint.completed_keys + (checkpoint.key_for(step),)
                )

        if step == WorkflowStep.confirmation:
            return replace(checkpoint, step=WorkflowStep.reminder_wait, resume_at=None)

        if step == WorkflowStep.reminder_wait:
            reminder_time = booking.scheduled_at - self._reminder_lead
            if reminder_time > now:
                return replace(checkpoint, step=WorkflowStep.reminder, resume_at=reminder_time)
            return replace(checkpoint, step=WorkflowStep.scheduled_wait, resume_at=None)

        if step == WorkflowStep.reminder:
            return replace(checkpoint, step=WorkflowStep.scheduled_wait, resume_at=None)

        if step == WorkflowStep.scheduled_wait:
            resume_at = booking.scheduled_at if booking.scheduled_at > now else None
            return replace(checkpoint, step=WorkflowStep.start_service, resume_at=resume_at)

        if step == WorkflowStep.start_service:
            return self._start_service(booking, checkpoint, now)

        if step == WorkflowStep.follow_up:
            return replace(
                checkpoint,
                step=WorkflowStep.done,
                status=WorkflowRunStatus.completed,
                resume_at=None,
            )

        raise WorkflowStepError(f"Unexpected workflow step {step.value}")

    def _start_service(self, booking: Booking, checkpoint: WorkflowCheckpoint, now: datetime) -> WorkflowCheckpoint:
        # Status must be re-read right before the transition; an operator may
        # have cancelled since the run was suspended.
        current = self._require_booking(booking.id)
        if current.status == BookingStatus.cancelled:
            return self._end_cancelled(checkpoint)

        if current.status == BookingStatus.confirmed:
            applied = self._store.compare_and_patch(
                BOOKINGS,
                booking.id,
                "status",
                BookingStatus.confirmed.value,
                {"status": BookingStatus.in_progress.value},
            )
            if applied:
                self._logger.info(
                    "Booking moved to in-progress",
                    extra={"booking_id": booking.id, "workflow_step": WorkflowStep.start_service.value},
                )
            elif self._require_booking(booking.id).status == BookingStatus.cancelled:
                return self._end_cancelled(checkpoint)

        return replace(
            checkpoint,
            step=WorkflowStep.follow_up,
            resume_at=now + self._service_window(current),
        )

    def _service_window(self, booking: Booking) -> timedelta:
        minutes = 0
        for service_id in booking.service_ids:
            doc = self._store.get(SERVICES, service_id)
            if doc:
                minutes += int(doc.get("duration_minutes") or 0)
        if minutes <= 0:
            minutes = self._default_service_minutes
        return timedelta(minutes=minutes) + self._service_buffer

    def _end_cancelled(self, checkpoint: WorkflowCheckpoint) -> WorkflowCheckpoint:
        self._logger.info(
            "Booking cancelled, ending workflow",
            extra={"booking_id": checkpoint.id, "workflow_step": checkpoint.step.value},
        )
        return replace(checkpoint, step=WorkflowStep.done, status=WorkflowRunStatus.cancelled, resume_at=None)

    def _fail(
        self,
        booking_id: str,
        checkpoint: WorkflowCheckpoint,
        error: Exception,
        now: datetime,
    ) -> WorkflowCheckpoint:
        self._logger.error(
            "Workflow step failed",
            extra={"booking_id": booking_id, "workflow_step": checkpoint.step.value, "error": str(error)},
        )
        failed = replace(checkpoint, status=WorkflowRunStatus.failed, error=str(error))
        self._store.put(WORKFLOW_CHECKPOINTS, booking_id, failed.to_document())
        self._mirror(booking_id, failed, now)
        self._scheduler.cancel(booking_id)
        return failed

    # -- side effects ---------------------------------------------------

    def _require_booking(self, booking_id: str) -> Booking:
        doc = self._store.get(BOOKINGS, booking_id)
        if doc is None:
            raise WorkflowStepError(f"Booking {booking_id} not found")
        return Booking.from_document(doc)

    def _dispatch(self, kind: NotificationKind, booking: Booking) -> None:
        email, name = self._recipient(booking)
        notification = BookingNotification(
            kind=kind,
            booking_id=booking.id,
            recipient_email=email,
            recipient_name=name,
            scheduled_at=booking.scheduled_at,
            total_price=booking.total_price,
            address=booking.location.address,
        )
        try:
            self._notifier.send(notification)
        except Exception as e:
            # Delivery is the notifier's concern; the run carries on.
            self._logger.error(
                "Notification failed",
                extra={"booking_id": booking.id, "workflow_step": kind.value, "error": str(e)},
            )

    def _recipient(self, booking: Booking) -> tuple[str | None, str | None]:
        doc = None
        if booking.user_id:
            doc = self._store.get(USERS, booking.user_id)
        elif booking.client_id:
            doc = self._store.get(CLIENTS, booking.client_id)
        if not doc:
            return None, None
        return doc.get("email"), doc.get("name")

    def _mirror(self, booking_id: str, checkpoint: WorkflowCheckpoint, now: datetime) -> None:
        """Best-effort update of the observable WorkflowState."""
        if checkpoint.status == WorkflowRunStatus.running and checkpoint.resume_at and checkpoint.resume_at > now:
            label = WAIT_LABELS.get(checkpoint.step, checkpoint.step).value
        else:
            label = checkpoint.step.value
        changes = {
            "current_step": label,
            "status": checkpoint.status.value,
            "error": checkpoint.error,
        }
        if checkpoint.status != WorkflowRunStatus.running:
            changes["completed_at"] = to_epoch(now)
        try:
            for doc in self._store.find(WORKFLOW_STATES, booking_id=booking_id):
                self._store.patch(WORKFLOW_STATES, doc["id"], changes)
        except Exception as e:
            self._logger.warning("Workflow state mirror failed", extra={"booking_id": booking_id, "error": str(e)})
        if checkpoint.status != WorkflowRunStatus.running:
            self._scheduler.cancel(booking_id)
