import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from autodetail.api.v1.assessments import router as assessments_router
from autodetail.api.v1.bookings import router as bookings_router
from autodetail.api.v1.clients import router as clients_router
from autodetail.api.v1.jobs import router as jobs_router
from autodetail.api.v1.pricing import router as pricing_router
from autodetail.api.v1.services import router as services_router
from autodetail.api.v1.tenants import router as tenants_router
from autodetail.api.v1.users import router as users_router
from autodetail.api.v1.vehicles import router as vehicles_router
from autodetail.application.exceptions import (
    NotFound,
    Unauthenticated,
    Unauthorized,
    ValidationError,
)
from autodetail.core.config import settings


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("booking_id", "workflow_step", "tenant_id", "service", "job", "error", "reason"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

app = FastAPI(title=f"{settings.BUSINESS_NAME} Booking API", version="1.0.0")


@app.exception_handler(Unauthorized)
def unauthorized_handler(request: Request, exc: Unauthorized) -> JSONResponse:
    # No identity at all is 401; a known caller without the right role or
    # ownership is 403.
    status = 401 if isinstance(exc, Unauthenticated) else 403
    return JSONResponse(status_code=status, content={"detail": str(exc)})


@app.exception_handler(NotFound)
def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
def validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc), "errors": exc.errors})


app.include_router(pricing_router, tags=["pricing"])
app.include_router(services_router, tags=["services"])
app.include_router(vehicles_router, tags=["vehicles"])
app.include_router(bookings_router, tags=["bookings"])
app.include_router(users_router, tags=["users"])
app.include_router(tenants_router, tags=["tenants"])
app.include_router(clients_router, tags=["clients"])
app.include_router(assessments_router, tags=["assessments"])
app.include_router(jobs_router, tags=["internal"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
