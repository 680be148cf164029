from datetime import datetime

from fastapi import APIRouter, Depends

from autodetail.api.v1.schemas import JobResultSchema, JobSpecSchema
from autodetail.application.authorization import Action, authorize
from autodetail.application.use_cases.maintenance import JOBS
from autodetail.domain.entities.user import User
from autodetail.wiring.dependencies import Container, get_actor, get_container

router = APIRouter(prefix="/internal/jobs")


@router.get("", response_model=list[JobSpecSchema])
def list_jobs(actor: User | None = Depends(get_actor)):
    authorize(actor, Action.maintenance_run)
    return [JobSpecSchema.model_validate(spec) for spec in JOBS.values()]


@router.post("/{name}", response_model=JobResultSchema)
def run_job(
    name: str,
    now: datetime | None = None,
    actor: User | None = Depends(get_actor),
    container: Container = Depends(get_container),
):
    authorize(actor, Action.maintenance_run)
    return JobResultSchema(job=name, result=container.jobs.run(name, now))
