from fastapi import APIRouter, Depends

from autodetail.api.v1.schemas import ServiceCreateSchema, ServiceSchema, ServiceUpdateSchema
from autodetail.domain.entities.service import ServiceCategory
from autodetail.domain.entities.user import User
from autodetail.wiring.dependencies import Container, get_actor, get_container

router = APIRouter(prefix="/services")


@router.get("", response_model=list[ServiceSchema])
def list_services(
    category: ServiceCategory | None = None,
    tenant_id: str | None = None,
    container: Container = Depends(get_container),
):
    if category is not None:
        services = container.catalog.list_by_category(category, tenant_id)
    else:
        services = container.catalog.list_active(tenant_id)
    return [ServiceSchema.model_validate(s) for s in services]


@router.get("/{service_id}", response_model=ServiceSchema)
def get_service(service_id: str, container: Container = Depends(get_container)):
    return ServiceSchema.model_validate(container.catalog.require(service_id))


@router.post("", response_model=ServiceSchema, status_code=201)
def create_service(
    req: ServiceCreateSchema,
    actor: User | None = Depends(get_actor),
    container: Container = Depends(get_container),
):
    service = container.catalog.create(actor, req.model_dump(mode="json"))
    return ServiceSchema.model_validate(service)


@router.patch("/{service_id}", response_model=ServiceSchema)
def update_service(
    service_id: str,
    req: ServiceUpdateSchema,
    actor: User | None = Depends(get_actor),
    container: Container = Depends(get_container),
):
    service = container.catalog.update(actor, service_id, req.model_dump(mode="json", exclude_unset=True))
    return ServiceSchema.model_validate(service)
