from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from autodetail.application.ports.scheduler import WorkflowSchedulerPort
from autodetail.application.use_cases.booking_workflow import BookingLifecycleWorkflow
from autodetail.domain.entities.timestamps import utcnow


class ProcessDueTimersUseCase:
    """Resume every lifecycle run whose durable timer has fired."""

    def __init__(
        self,
        scheduler: WorkflowSchedulerPort,
        workflow: BookingLifecycleWorkflow,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._scheduler = scheduler
        self._workflow = workflow
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    def execute(self, now: datetime | None = None, limit: int = 100) -> int:
        now = now or self._clock()
        timers = self._scheduler.due(now, limit=limit)
        for timer in timers:
            # Acknowledge only after advancing: a crash in between leaves the
            # timer in place and the run is simply resumed again.
            self._workflow.advance(timer.booking_id, now)
            self._scheduler.acknowledge(timer)
        if timers:
            self._logger.info("Resumed due workflows", extra={"job": "process-due-workflows", "reason": f"count={len(timers)}"})
        return len(timers)
