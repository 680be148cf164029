"""
Periodic maintenance jobs.

The jobs do not schedule themselves: an external trigger (cron, a platform
scheduler, `scripts/run_job.py` or the internal HTTP endpoint) calls
`MaintenanceJobs.run(name)` on the cadence listed in `JOBS`. Every job works
on closed windows only, so it can run alongside booking creation.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from autodetail.application.exceptions import NotFound
from autodetail.application.ports.document_store import (
    ANALYTICS,
    BOOKINGS,
    PRICING_HISTORY,
    DocumentStorePort,
)
from autodetail.application.use_cases.knowledge import KnowledgeSeed, PricingKnowledgeUseCase
from autodetail.application.use_cases.workflow_timers import ProcessDueTimersUseCase
from autodetail.application.utils.money import round_display
from autodetail.domain.entities.analytics import DailyMetric
from autodetail.domain.entities.booking import BookingStatus
from autodetail.domain.entities.knowledge_item import KnowledgeCategory
from autodetail.domain.entities.timestamps import ensure_utc, to_epoch, utcnow

UPDATE_PRICING_KNOWLEDGE = "update-pricing-knowledge"
CALCULATE_DAILY_ANALYTICS = "calculate-daily-analytics"
CLEANUP_OLD_DATA = "cleanup-old-data"
PROCESS_DUE_WORKFLOWS = "process-due-workflows"

# The refresh job keeps exactly one acceptance snippet, replaced on every run.
ACCEPTANCE_SNIPPET_ID = "booking-history:acceptance-by-slot"


@dataclass(frozen=True)
class JobSpec:
    name: str
    schedule: str
    description: str


JOBS: dict[str, JobSpec] = {
    spec.name: spec
    for spec in (
        JobSpec(UPDATE_PRICING_KNOWLEDGE, "daily 02:00 UTC", "Acceptance rate by time slot over the refresh window"),
        JobSpec(CALCULATE_DAILY_ANALYTICS, "daily 03:00 UTC", "Bookings, revenue and completions for the previous day"),
        JobSpec(CLEANUP_OLD_DATA, "weekly Monday 04:00 UTC", "Delete pricing history past the retention window"),
        JobSpec(PROCESS_DUE_WORKFLOWS, "every minute", "Resume booking workflows whose timers have fired"),
    )
}


class MaintenanceJobs:
    def __init__(
        self,
        store: DocumentStorePort,
        due_timers: ProcessDueTimersUseCase,
        knowledge: PricingKnowledgeUseCase | None = None,
        clock: Callable[[], datetime] = utcnow,
        retention_days: int = 90,
        refresh_window_days: int = 30,
    ) -> None:
        self._store = store
        self._due_timers = due_timers
        self._knowledge = knowledge
        self._clock = clock
        self._retention = timedelta(days=retention_days)
        self._refresh_window = timedelta(days=refresh_window_days)
        self._logger = logging.getLogger(__name__)
        self._handlers: dict[str, Callable[[datetime], dict[str, Any]]] = {
            UPDATE_PRICING_KNOWLEDGE: self.update_pricing_knowledge,
            CALCULATE_DAILY_ANALYTICS: self.calculate_daily_analytics,
            CLEANUP_OLD_DATA: self.cleanup_old_data,
            PROCESS_DUE_WORKFLOWS: self.process_due_workflows,
        }

    def run(self, name: str, now: datetime | None = None) -> dict[str, Any]:
        handler = self._handlers.get(name)
        if handler is None:
            raise NotFound(f"Unknown job {name}")
        now = ensure_utc(now or self._clock())
        self._logger.info("Job started", extra={"job": name})
        result = handler(now)
        self._logger.info("Job finished", extra={"job": name, "reason": str(result)})
        return result

    def update_pricing_knowledge(self, now: datetime) -> dict[str, Any]:
        start = now - self._refresh_window
        records = self._store.find_range(PRICING_HISTORY, "scheduled_at", to_epoch(start), to_epoch(now))

        slots: dict[str, dict[str, int]] = defaultdict(lambda: {"total": 0, "accepted": 0})
        for record in records:
            slot = slots[record["time_of_day"]]
            slot["total"] += 1
            if record.get("was_accepted", True):
                slot["accepted"] += 1

        rates = {
            name: round_display(data["accepted"] / data["total"] * 100)
            for name, data in sorted(slots.items())
        }
        self._logger.info("Time slot acceptance rates", extra={"job": UPDATE_PRICING_KNOWLEDGE, "reason": str(rates)})

        added = 0
        if rates and self._knowledge is not None:
            summary = ", ".join(f"{slot} {rate}%" for slot, rate in rates.items())
            added = self._knowledge.seed(
                [
                    KnowledgeSeed(
                        content=f"Quote acceptance by time of day over the last {self._refresh_window.days} days: {summary}",
                        category=KnowledgeCategory.customer_behavior,
                        source="booking-history",
                        item_id=ACCEPTANCE_SNIPPET_ID,
                    )
                ]
            )
        return {"bookings_analyzed": len(records), "acceptance_by_slot": rates, "insights_added": added}

    def calculate_daily_analytics(self, now: datetime) -> dict[str, Any]:
        day_end = now.replace(hour=0, minute=0, second=0, microsecond=0)
        day_start = day_end - timedelta(days=1)
        docs = self._store.find_range(BOOKINGS, "scheduled_at", to_epoch(day_start), to_epoch(day_end))

        completed = [d for d in docs if d["status"] == BookingStatus.completed.value]
        revenue = sum(int(d["total_price"]) for d in completed)
        values = {
            "daily_bookings": len(docs),
            "daily_revenue": revenue,
            "daily_completed": len(completed),
        }
        # Keyed by day and metric so a re-run overwrites instead of duplicating.
        day_key = day_start.date().isoformat()
        with self._store.transaction():
            for metric, value in values.items():
                doc_id = f"{day_key}:{metric}"
                metric_doc = DailyMetric(id=doc_id, date=day_start, metric=metric, value=float(value))
                self._store.put(ANALYTICS, doc_id, metric_doc.to_document())
        return {"date": day_key, "bookings": len(docs), "revenue": revenue, "completed": len(completed)}

    def cleanup_old_data(self, now: datetime) -> dict[str, Any]:
        cutoff = now - self._retention
        old = self._store.find_range(PRICING_HISTORY, "scheduled_at", None, to_epoch(cutoff))
        with self._store.transaction():
            for doc in old:
                self._store.delete(PRICING_HISTORY, doc["id"])
        return {"deleted_records": len(old)}

    def process_due_workflows(self, now: datetime) -> dict[str, Any]:
        return {"resumed": self._due_timers.execute(now)}
