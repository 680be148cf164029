from fastapi import APIRouter, BackgroundTasks, Depends

from autodetail.api.v1.schemas import (
    AssessmentConvertSchema,
    AssessmentCreateSchema,
    AssessmentDetailsSchema,
    AssessmentSchema,
    AssessmentServicesSchema,
    BookingSchema,
    ConditionSchema,
)
from autodetail.domain.entities.assessment import ConditionAssessment
from autodetail.domain.entities.user import User
from autodetail.wiring.dependencies import Container, get_actor, get_container

router = APIRouter(prefix="/assessments")


@router.post("", response_model=AssessmentSchema, status_code=201)
def create_assessment(req: AssessmentCreateSchema, container: Container = Depends(get_container)):
    assessment = container.assessments.create(
        req.tenant_id,
        req.client_id,
        req.vehicle_info.model_dump(mode="json"),
    )
    return AssessmentSchema.model_validate(assessment)


@router.get("/{assessment_id}", response_model=AssessmentDetailsSchema)
def get_assessment(assessment_id: str, container: Container = Depends(get_container)):
    return AssessmentDetailsSchema.model_validate(container.assessments.get(assessment_id))


@router.put("/{assessment_id}/condition", response_model=AssessmentSchema)
def update_condition(
    assessment_id: str,
    req: ConditionSchema,
    container: Container = Depends(get_container),
):
    condition = ConditionAssessment.from_document(req.model_dump(mode="json"))
    return AssessmentSchema.model_validate(container.assessments.update_condition(assessment_id, condition))


@router.put("/{assessment_id}/services", response_model=AssessmentSchema)
def update_services(
    assessment_id: str,
    req: AssessmentServicesSchema,
    container: Container = Depends(get_container),
):
    return AssessmentSchema.model_validate(container.assessments.update_services(assessment_id, req.service_ids))


@router.post("/{assessment_id}/submit", response_model=AssessmentSchema)
def submit(assessment_id: str, container: Container = Depends(get_container)):
    return AssessmentSchema.model_validate(container.assessments.submit(assessment_id))


@router.post("/{assessment_id}/review", response_model=AssessmentSchema)
def review(
    assessment_id: str,
    actor: User | None = Depends(get_actor),
    container: Container = Depends(get_container),
):
    return AssessmentSchema.model_validate(container.assessments.review(actor, assessment_id))


@router.post("/{assessment_id}/approve", response_model=AssessmentSchema)
def approve(
    assessment_id: str,
    actor: User | None = Depends(get_actor),
    container: Container = Depends(get_container),
):
    return AssessmentSchema.model_validate(container.assessments.approve(actor, assessment_id))


@router.post("/{assessment_id}/convert", response_model=BookingSchema, status_code=201)
def convert(
    assessment_id: str,
    req: AssessmentConvertSchema,
    background: BackgroundTasks,
    actor: User | None = Depends(get_actor),
    container: Container = Depends(get_container),
):
    booking = container.assessments.convert_to_booking(
        actor,
        assessment_id,
        scheduled_at=req.scheduled_at,
        location=req.location,
        notes=req.notes,
    )
    background.add_task(container.workflow.advance, booking.id)
    return BookingSchema.model_validate(booking)
