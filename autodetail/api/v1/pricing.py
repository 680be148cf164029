from datetime import datetime

from fastapi import APIRouter, Depends

from autodetail.api.v1.schemas import PriceBreakdownSchema, PricingAnalyticsSchema, QuoteRequestSchema
from autodetail.domain.entities.user import User
from autodetail.wiring.dependencies import Container, get_actor, get_container

router = APIRouter(prefix="/pricing")


@router.post("/quote", response_model=PriceBreakdownSchema)
def quote(
    req: QuoteRequestSchema,
    actor: User | None = Depends(get_actor),
    container: Container = Depends(get_container),
):
    """Advisory quote. Anonymous callers never receive a loyalty discount."""
    breakdown = container.pricing.calculate_price(
        req.service_ids,
        req.vehicle_type,
        req.scheduled_at,
        customer_id=actor.id if actor else None,
        require_nonzero=req.require_nonzero,
        tenant_id=req.tenant_id,
    )
    return PriceBreakdownSchema.model_validate(breakdown)


@router.get("/analytics", response_model=PricingAnalyticsSchema)
def analytics(
    start: datetime,
    end: datetime,
    actor: User | None = Depends(get_actor),
    container: Container = Depends(get_container),
):
    result = container.analytics.get_pricing_analytics(actor, start, end)
    return PricingAnalyticsSchema.model_validate(result)
