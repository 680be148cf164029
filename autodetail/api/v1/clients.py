from fastapi import APIRouter, Depends

from autodetail.api.v1.schemas import ClientCreateSchema, ClientSchema
from autodetail.wiring.dependencies import Container, get_container

router = APIRouter(prefix="/clients")


@router.post("", response_model=ClientSchema)
def create_or_get_client(req: ClientCreateSchema, container: Container = Depends(get_container)):
    client = container.clients.create_or_get(req.tenant_id, req.email, req.name, req.phone)
    return ClientSchema.model_validate(client)


@router.get("/{client_id}", response_model=ClientSchema)
def get_client(client_id: str, container: Container = Depends(get_container)):
    return ClientSchema.model_validate(container.clients.get(client_id))
