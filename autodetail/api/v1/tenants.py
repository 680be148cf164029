from fastapi import APIRouter, Depends

from autodetail.api.v1.schemas import (
    AssessmentDetailsSchema,
    ClientSchema,
    TenantCreateSchema,
    TenantPublicSchema,
    TenantSchema,
    TenantStatsSchema,
    TenantUpdateSchema,
)
from autodetail.application.exceptions import NotFound
from autodetail.domain.entities.assessment import AssessmentStatus
from autodetail.domain.entities.tenant import Tenant
from autodetail.domain.entities.user import User
from autodetail.wiring.dependencies import Container, get_actor, get_container

router = APIRouter(prefix="/tenants")


def _public(container: Container, tenant: Tenant | None) -> TenantPublicSchema:
    if tenant is None or not tenant.is_active:
        raise NotFound("Tenant not found")
    return TenantPublicSchema.model_validate(container.tenants.public_profile(tenant))


@router.post("", response_model=TenantSchema, status_code=201)
def create_tenant(
    req: TenantCreateSchema,
    actor: User | None = Depends(get_actor),
    container: Container = Depends(get_container),
):
    tenant = container.tenants.create_tenant(
        actor,
        business_name=req.business_name,
        slug=req.slug,
        contact=req.contact.model_dump(),
        branding=req.branding,
    )
    return TenantSchema.model_validate(tenant)


@router.get("/mine", response_model=TenantSchema | None)
def my_tenant(actor: User | None = Depends(get_actor), container: Container = Depends(get_container)):
    tenant = container.tenants.my_tenant(actor)
    return TenantSchema.model_validate(tenant) if tenant else None


@router.get("/by-slug/{slug}", response_model=TenantPublicSchema)
def tenant_by_slug(slug: str, container: Container = Depends(get_container)):
    return _public(container, container.tenants.get_by_slug(slug))


@router.get("/by-qr/{qr_code}", response_model=TenantPublicSchema)
def tenant_by_qr_code(qr_code: str, container: Container = Depends(get_container)):
    return _public(container, container.tenants.get_by_qr_code(qr_code))


@router.patch("/{tenant_id}", response_model=TenantSchema)
def update_tenant(
    tenant_id: str,
    req: TenantUpdateSchema,
    actor: User | None = Depends(get_actor),
    container: Container = Depends(get_container),
):
    tenant = container.tenants.update_settings(actor, tenant_id, settings=req.settings, branding=req.branding)
    return TenantSchema.model_validate(tenant)


@router.get("/{tenant_id}/stats", response_model=TenantStatsSchema)
def tenant_stats(
    tenant_id: str,
    actor: User | None = Depends(get_actor),
    container: Container = Depends(get_container),
):
    return TenantStatsSchema.model_validate(container.tenants.tenant_stats(actor, tenant_id))


@router.get("/{tenant_id}/clients", response_model=list[ClientSchema])
def tenant_clients(
    tenant_id: str,
    actor: User | None = Depends(get_actor),
    container: Container = Depends(get_container),
):
    return [ClientSchema.model_validate(c) for c in container.clients.list_for_tenant(actor, tenant_id)]


@router.get("/{tenant_id}/assessments", response_model=list[AssessmentDetailsSchema])
def tenant_assessments(
    tenant_id: str,
    status: AssessmentStatus | None = None,
    actor: User | None = Depends(get_actor),
    container: Container = Depends(get_container),
):
    details = container.assessments.list_for_tenant(actor, tenant_id, status)
    return [AssessmentDetailsSchema.model_validate(d) for d in details]
