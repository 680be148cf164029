from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from autodetail.domain.entities.assessment import AssessmentStatus, ConditionGrade
from autodetail.domain.entities.booking import BookingStatus
from autodetail.domain.entities.service import ServiceCategory
from autodetail.domain.entities.user import UserRole
from autodetail.domain.entities.vehicle import VehicleType
from autodetail.domain.entities.workflow import WorkflowRunStatus


class EntitySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# -- users ---------------------------------------------------------------

class UserSchema(EntitySchema):
    id: str
    email: str
    name: str
    phone: str | None = None
    role: UserRole
    tenant_id: str | None = None


class ProfileUpdateSchema(BaseModel):
    name: str | None = None
    phone: str | None = None


# -- pricing -------------------------------------------------------------

class QuoteRequestSchema(BaseModel):
    service_ids: list[str] = Field(default_factory=list)
    vehicle_type: str
    scheduled_at: datetime
    require_nonzero: bool = False
    tenant_id: str | None = None


class PriceStepsSchema(EntitySchema):
    base: int
    after_demand: int
    after_seasonal: int
    after_time: int
    final: int


class PriceBreakdownSchema(EntitySchema):
    base_price: int
    vehicle_multiplier: float
    demand_multiplier: float
    seasonal_multiplier: float
    time_multiplier: float
    loyalty_discount: float
    final_price: int
    steps: PriceStepsSchema
    insights: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class VehicleTypePricingSchema(EntitySchema):
    vehicle_type: str
    count: int
    avg_price: float


class PricingAnalyticsSchema(EntitySchema):
    total_bookings: int
    accepted_bookings: int
    acceptance_rate: float
    avg_base_price: float
    avg_final_price: float
    price_by_vehicle_type: list[VehicleTypePricingSchema]


# -- services ------------------------------------------------------------

class ServiceSchema(EntitySchema):
    id: str
    name: str
    description: str
    category: ServiceCategory
    base_price: int
    duration_minutes: int
    is_active: bool
    vehicle_type_multipliers: dict[VehicleType, float]
    tenant_id: str | None = None


class ServiceCreateSchema(BaseModel):
    name: str
    description: str
    category: ServiceCategory
    base_price: int
    duration_minutes: int
    vehicle_type_multipliers: dict[str, float] = Field(default_factory=dict)


class ServiceUpdateSchema(BaseModel):
    name: str | None = None
    description: str | None = None
    base_price: int | None = None
    duration_minutes: int | None = None
    is_active: bool | None = None
    vehicle_type_multipliers: dict[str, float] | None = None


# -- vehicles ------------------------------------------------------------

class VehicleSchema(EntitySchema):
    id: str
    make: str
    model: str
    year: int
    color: str
    vehicle_type: VehicleType
    license_plate: str | None = None
    notes: str | None = None


class VehicleCreateSchema(BaseModel):
    make: str
    model: str
    year: int
    color: str
    vehicle_type: str
    license_plate: str | None = None
    notes: str | None = None


class VehicleUpdateSchema(BaseModel):
    make: str | None = None
    model: str | None = None
    year: int | None = None
    color: str | None = None
    vehicle_type: str | None = None
    license_plate: str | None = None
    notes: str | None = None


# -- bookings ------------------------------------------------------------

class LocationSchema(EntitySchema):
    address: str
    city: str
    state: str
    zip_code: str


class PricingFactorsSchema(EntitySchema):
    base_price: int
    vehicle_multiplier: float
    demand_multiplier: float
    seasonal_multiplier: float
    loyalty_discount: float
    final_price: int


class BookingSchema(EntitySchema):
    id: str
    user_id: str | None = None
    client_id: str | None = None
    tenant_id: str | None = None
    vehicle_id: str | None = None
    service_ids: list[str]
    scheduled_at: datetime
    status: BookingStatus
    total_price: int
    pricing_factors: PricingFactorsSchema
    location: LocationSchema
    notes: str | None = None
    completed_at: datetime | None = None
    assigned_detailer_id: str | None = None
    source_assessment_id: str | None = None


class BookingDetailsSchema(EntitySchema):
    booking: BookingSchema
    vehicle: VehicleSchema | None = None
    services: list[ServiceSchema]


class BookingCreateSchema(BaseModel):
    vehicle_id: str | None = None
    service_ids: list[str] = Field(default_factory=list)
    scheduled_at: datetime | None = None
    location: dict[str, Any] = Field(default_factory=dict)
    notes: str | None = None
    tenant_id: str | None = None


class BookingStatusUpdateSchema(BaseModel):
    status: BookingStatus


class AssignDetailerSchema(BaseModel):
    detailer_id: str


class WorkflowStateSchema(EntitySchema):
    workflow_id: str
    booking_id: str
    current_step: str
    status: WorkflowRunStatus
    started_at: datetime
    completed_at: datetime | None = None
    error: str | None = None


# -- tenants and clients -------------------------------------------------

class TenantContactSchema(EntitySchema):
    phone: str = ""
    email: str
    address: str
    city: str
    state: str
    zip_code: str


class BrandingSchema(EntitySchema):
    logo: str | None = None
    primary_color: str = "#0066CC"
    secondary_color: str = "#00CCCC"
    accent_color: str = "#FF6B35"


class TenantSettingsSchema(EntitySchema):
    notification_email: str
    allow_self_assessment: bool
    require_vin: bool
    auto_approve_bookings: bool


class TenantSchema(EntitySchema):
    id: str
    business_name: str
    slug: str
    qr_code: str
    branding: BrandingSchema
    contact: TenantContactSchema
    settings: TenantSettingsSchema
    is_active: bool


class TenantPublicSchema(BaseModel):
    id: str
    business_name: str
    slug: str
    branding: BrandingSchema
    contact: TenantContactSchema
    allow_self_assessment: bool
    require_vin: bool


class TenantCreateSchema(BaseModel):
    business_name: str
    slug: str
    contact: TenantContactSchema
    branding: dict[str, Any] | None = None


class TenantUpdateSchema(BaseModel):
    settings: dict[str, Any] | None = None
    branding: dict[str, Any] | None = None


class TenantStatsSchema(EntitySchema):
    total_assessments: int
    total_bookings: int
    total_clients: int
    completed_bookings: int
    total_revenue: int
    conversion_rate: float


class ClientSchema(EntitySchema):
    id: str
    tenant_id: str
    email: str
    name: str
    phone: str
    created_at: datetime | None = None
    last_assessment_at: datetime | None = None


class ClientCreateSchema(BaseModel):
    tenant_id: str
    email: str
    name: str
    phone: str


# -- assessments ---------------------------------------------------------

class ExteriorConditionSchema(EntitySchema):
    paint: ConditionGrade = ConditionGrade.good
    scratches: bool = False
    dents: bool = False
    rust: bool = False
    notes: str | None = None


class InteriorConditionSchema(EntitySchema):
    seats: ConditionGrade = ConditionGrade.good
    carpet: ConditionGrade = ConditionGrade.good
    dashboard: ConditionGrade = ConditionGrade.good
    stains: bool = False
    odors: bool = False
    pet_hair: bool = False
    notes: str | None = None


class OverallConditionSchema(EntitySchema):
    mileage: int = 0
    smoking_vehicle: bool = False
    last_detail_date: str | None = None
    notes: str | None = None


class ConditionSchema(EntitySchema):
    exterior: ExteriorConditionSchema = Field(default_factory=ExteriorConditionSchema)
    interior: InteriorConditionSchema = Field(default_factory=InteriorConditionSchema)
    overall: OverallConditionSchema = Field(default_factory=OverallConditionSchema)


class VehicleInfoSchema(EntitySchema):
    make: str
    model: str
    year: int
    color: str
    vehicle_type: VehicleType
    vin: str | None = None


class AssessmentPricingFactorsSchema(EntitySchema):
    base_price: int
    vehicle_multiplier: float
    condition_multiplier: float
    demand_multiplier: float
    final_price: int


class AssessmentSchema(EntitySchema):
    id: str
    tenant_id: str
    client_id: str
    vehicle_info: VehicleInfoSchema
    condition: ConditionSchema
    selected_service_ids: list[str]
    estimated_price: int
    pricing_factors: AssessmentPricingFactorsSchema
    status: AssessmentStatus
    converted_booking_id: str | None = None
    created_at: datetime | None = None
    submitted_at: datetime | None = None


class AssessmentDetailsSchema(EntitySchema):
    assessment: AssessmentSchema
    client: ClientSchema | None = None
    services: list[ServiceSchema]


class AssessmentCreateSchema(BaseModel):
    tenant_id: str
    client_id: str
    vehicle_info: VehicleInfoSchema


class AssessmentServicesSchema(BaseModel):
    service_ids: list[str]


class AssessmentConvertSchema(BaseModel):
    scheduled_at: datetime | None = None
    location: dict[str, Any] = Field(default_factory=dict)
    notes: str | None = None


# -- jobs ----------------------------------------------------------------

class JobSpecSchema(EntitySchema):
    name: str
    schedule: str
    description: str


class JobResultSchema(BaseModel):
    job: str
    result: dict[str, Any]
