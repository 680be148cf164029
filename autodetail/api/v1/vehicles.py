from fastapi import APIRouter, Depends, Response

from autodetail.api.v1.schemas import VehicleCreateSchema, VehicleSchema, VehicleUpdateSchema
from autodetail.domain.entities.user import User
from autodetail.wiring.dependencies import Container, get_actor, get_container

router = APIRouter(prefix="/vehicles")


@router.get("", response_model=list[VehicleSchema])
def list_vehicles(actor: User | None = Depends(get_actor), container: Container = Depends(get_container)):
    return [VehicleSchema.model_validate(v) for v in container.vehicles.list_mine(actor)]


@router.post("", response_model=VehicleSchema, status_code=201)
def add_vehicle(
    req: VehicleCreateSchema,
    actor: User | None = Depends(get_actor),
    container: Container = Depends(get_container),
):
    return VehicleSchema.model_validate(container.vehicles.add(actor, req.model_dump()))


@router.get("/{vehicle_id}", response_model=VehicleSchema)
def get_vehicle(
    vehicle_id: str,
    actor: User | None = Depends(get_actor),
    container: Container = Depends(get_container),
):
    return VehicleSchema.model_validate(container.vehicles.get(actor, vehicle_id))


@router.patch("/{vehicle_id}", response_model=VehicleSchema)
def update_vehicle(
    vehicle_id: str,
    req: VehicleUpdateSchema,
    actor: User | None = Depends(get_actor),
    container: Container = Depends(get_container),
):
    vehicle = container.vehicles.update(actor, vehicle_id, req.model_dump(exclude_unset=True))
    return VehicleSchema.model_validate(vehicle)


@router.delete("/{vehicle_id}", status_code=204)
def delete_vehicle(
    vehicle_id: str,
    actor: User | None = Depends(get_actor),
    container: Container = Depends(get_container),
):
    container.vehicles.delete(actor, vehicle_id)
    return Response(status_code=204)
