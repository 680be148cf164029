from fastapi import APIRouter, BackgroundTasks, Depends

from autodetail.api.v1.schemas import (
    AssignDetailerSchema,
    BookingCreateSchema,
    BookingDetailsSchema,
    BookingSchema,
    BookingStatusUpdateSchema,
    WorkflowStateSchema,
)
from autodetail.application.authorization import Action, authorize
from autodetail.application.exceptions import NotFound
from autodetail.domain.entities.booking import BookingStatus
from autodetail.domain.entities.user import User
from autodetail.wiring.dependencies import Container, get_actor, get_container

router = APIRouter(prefix="/bookings")


@router.post("", response_model=BookingSchema, status_code=201)
def create_booking(
    req: BookingCreateSchema,
    background: BackgroundTasks,
    actor: User | None = Depends(get_actor),
    container: Container = Depends(get_container),
):
    booking = container.bookings.create_booking(
        actor,
        vehicle_id=req.vehicle_id,
        service_ids=req.service_ids,
        scheduled_at=req.scheduled_at,
        location=req.location,
        notes=req.notes,
        tenant_id=req.tenant_id,
    )
    # The durable timer is already stored; this only saves waiting for the next sweep.
    background.add_task(container.workflow.advance, booking.id)
    return BookingSchema.model_validate(booking)


@router.get("/mine", response_model=list[BookingDetailsSchema])
def my_bookings(actor: User | None = Depends(get_actor), container: Container = Depends(get_container)):
    return [BookingDetailsSchema.model_validate(d) for d in container.bookings.list_mine(actor)]


@router.get("", response_model=list[BookingSchema])
def list_bookings(
    status: BookingStatus | None = None,
    actor: User | None = Depends(get_actor),
    container: Container = Depends(get_container),
):
    return [BookingSchema.model_validate(b) for b in container.bookings.list_all(actor, status)]


@router.get("/{booking_id}", response_model=BookingDetailsSchema)
def get_booking(
    booking_id: str,
    actor: User | None = Depends(get_actor),
    container: Container = Depends(get_container),
):
    return BookingDetailsSchema.model_validate(container.bookings.get(actor, booking_id))


@router.get("/{booking_id}/workflow", response_model=WorkflowStateSchema)
def get_workflow_state(
    booking_id: str,
    actor: User | None = Depends(get_actor),
    container: Container = Depends(get_container),
):
    authorize(actor, Action.booking_read, container.bookings.require(booking_id))
    state = container.workflow.get_state(booking_id)
    if state is None:
        raise NotFound(f"No workflow for booking {booking_id}")
    return WorkflowStateSchema.model_validate(state)


@router.post("/{booking_id}/status", response_model=BookingSchema)
def update_status(
    booking_id: str,
    req: BookingStatusUpdateSchema,
    actor: User | None = Depends(get_actor),
    container: Container = Depends(get_container),
):
    return BookingSchema.model_validate(container.bookings.update_status(actor, booking_id, req.status))


@router.post("/{booking_id}/assign", response_model=BookingSchema)
def assign_detailer(
    booking_id: str,
    req: AssignDetailerSchema,
    actor: User | None = Depends(get_actor),
    container: Container = Depends(get_container),
):
    booking = container.bookings.assign_detailer(actor, booking_id, req.detailer_id)
    return BookingSchema.model_validate(booking)
