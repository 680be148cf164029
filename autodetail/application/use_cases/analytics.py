from __future__ import annotations

from collections import defaultdict
from datetime import datetime

from autodetail.application.authorization import Action, authorize
from autodetail.application.ports.document_store import PRICING_HISTORY, DocumentStorePort
from autodetail.application.utils.money import round_display
from autodetail.domain.entities.analytics import PricingAnalytics, VehicleTypePricing
from autodetail.domain.entities.pricing_history import PricingHistory
from autodetail.domain.entities.timestamps import ensure_utc, to_epoch
from autodetail.domain.entities.user import User


def summarize(records: list[PricingHistory]) -> PricingAnalytics:
    """
    Roll up pricing history. Empty input yields zeros, never a division error.
    Vehicle types are grouped by the raw value recorded at booking time.
    """
    total = len(records)
    if total == 0:
        return PricingAnalytics(
            total_bookings=0,
            accepted_bookings=0,
            acceptance_rate=0.0,
            avg_base_price=0.0,
            avg_final_price=0.0,
            price_by_vehicle_type=[],
        )

    accepted = sum(1 for r in records if r.was_accepted)
    groups: dict[str, list[int]] = defaultdict(list)
    for record in records:
        groups[record.vehicle_type].append(record.final_price)

    return PricingAnalytics(
        total_bookings=total,
        accepted_bookings=accepted,
        acceptance_rate=round_display(accepted / total * 100),
        avg_base_price=round_display(sum(r.base_price for r in records) / total),
        avg_final_price=round_display(sum(r.final_price for r in records) / total),
        price_by_vehicle_type=[
            VehicleTypePricing(
                vehicle_type=vehicle_type,
                count=len(prices),
                avg_price=round_display(sum(prices) / len(prices)),
            )
            for vehicle_type, prices in sorted(groups.items())
        ],
    )


class PricingAnalyticsUseCase:
    def __init__(self, store: DocumentStorePort) -> None:
        self._store = store

    def history_between(self, start: datetime, end: datetime) -> list[PricingHistory]:
        docs = self._store.find_range(
            PRICING_HISTORY,
            "scheduled_at",
            to_epoch(ensure_utc(start)),
            to_epoch(ensure_utc(end)),
        )
        return [PricingHistory.from_document(d) for d in docs]

    def get_pricing_analytics(self, actor: User | None, start: datetime, end: datetime) -> PricingAnalytics:
        """Admin rollup over pricing records scheduled in `[start, end)`."""
        authorize(actor, Action.analytics_read)
        return summarize(self.history_between(start, end))
