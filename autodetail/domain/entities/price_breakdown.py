from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PriceSteps:
    """Rounded checkpoints for display. `final` is the authoritative price."""

    base: int
    after_demand: int
    after_seasonal: int
    after_time: int
    final: int


@dataclass(frozen=True)
class PriceBreakdown:
    base_price: int
    vehicle_multiplier: float
    demand_multiplier: float
    seasonal_multiplier: float
    time_multiplier: float
    loyalty_discount: float
    final_price: int
    steps: PriceSteps
    insights: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
