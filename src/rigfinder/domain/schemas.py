"""Pydantic v2 schemas for API request/response validation.

Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel

from rigfinder.domain.enums import (
    AvailabilityStatus,
    BillingStatus,
    ContactEventType,
    EquipmentType,
    NeedDate,
    PlanStatus,
    ReportStatus,
    SizeClass,
)


class CamelModel(BaseModel):
    """Base model with camelCase aliases; accepts either spelling on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CamelORMModel(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


def _reject_control_chars(value: str) -> str:
    if any(ord(ch) < 32 for ch in value):
        raise ValueError("must not contain control characters")
    return value


# Ids feed the dedupe fingerprint, which joins fields with a control character
EntityId = Annotated[str, Field(min_length=1, max_length=100), AfterValidator(_reject_control_chars)]
OptionalId = Annotated[str, Field(max_length=100), AfterValidator(_reject_control_chars)] | None

# Money is Decimal in the services and a plain JSON number on the wire
Money = Annotated[float, BeforeValidator(float)]


def _reject_null(value):
    """Partial updates may omit a field but not null out a required column."""
    if value is None:
        raise ValueError("may be omitted but not null")
    return value


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str


# ---------------------------------------------------------------------------
# Contact events
# ---------------------------------------------------------------------------


class LogContactEventRequest(CamelModel):
    """Deduplicated contact-event logging (public)."""

    vendor_id: EntityId
    equipment_id: OptionalId = None
    event_type: ContactEventType
    search_location_text: str | None = Field(default=None, max_length=500)
    search_radius: float | None = Field(default=None, ge=0)
    need_date: str | None = Field(default=None, max_length=50)
    referrer: str | None = Field(default=None, max_length=500)
    session_id: OptionalId = None


class LogContactEventResponse(CamelModel):
    ok: bool = True
    billable: bool
    event_id: str | None = None
    session_id: str
    reason: str | None = None


class ContactEventCreate(CamelModel):
    """Legacy click tracking (public, no dedupe)."""

    vendor_id: EntityId
    equipment_id: OptionalId = None
    event_type: ContactEventType
    search_params_json: str | None = None


class ContactEventResponse(CamelORMModel):
    id: str
    vendor_id: str
    equipment_id: str | None = None
    event_type: ContactEventType
    session_id: str | None = None
    is_billable: bool
    search_params_json: str | None = None
    created_at: datetime


# ---------------------------------------------------------------------------
# Leads / Reports
# ---------------------------------------------------------------------------


class LeadRequestCreate(CamelModel):
    vendor_id: EntityId
    equipment_id: OptionalId = None
    requester_name: str | None = Field(default=None, max_length=255)
    requester_phone: str | None = Field(default=None, max_length=50)
    requester_email: EmailStr | None = None
    message: str | None = None
    jobsite_location_text: str | None = Field(default=None, max_length=500)
    radius: float | None = Field(default=None, ge=0)
    need_date: NeedDate | None = None


class LeadRequestResponse(CamelORMModel):
    id: str
    vendor_id: str
    equipment_id: str | None = None
    requester_name: str | None = None
    requester_phone: str | None = None
    requester_email: str | None = None
    message: str | None = None
    jobsite_location_text: str | None = None
    radius: float | None = None
    need_date: str | None = None
    created_at: datetime


class ReportCreate(CamelModel):
    equipment_id: OptionalId = None
    vendor_id: OptionalId = None
    reason: str = Field(default="outdated", max_length=255)


class ReportResponse(CamelORMModel):
    id: str
    equipment_id: str | None = None
    vendor_id: str | None = None
    reason: str
    status: ReportStatus
    created_at: datetime
    reviewed_at: datetime | None = None


class ReportAdminResponse(ReportResponse):
    equipment_title: str | None = None
    vendor_name: str | None = None


class ReportUpdate(CamelModel):
    status: ReportStatus


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


class ListingResponse(CamelORMModel):
    id: str
    vendor_id: str
    vendor_name: str
    vendor_phone: str
    vendor_email: str
    vendor_website: str | None = None
    is_sponsored: bool
    type: EquipmentType
    size_class: SizeClass | None = None
    make: str | None = None
    model: str | None = None
    year: int | None = None
    rate_day_min: float | None = None
    rate_day_max: float | None = None
    rate_hour_min: float | None = None
    rate_hour_max: float | None = None
    notes: str | None = None
    image_url: str | None = None
    availability_status: AvailabilityStatus
    earliest_date: datetime | None = None
    last_updated: datetime | None = None
    distance: float | None = None
    freshness: str | None = None


# ---------------------------------------------------------------------------
# Vendors / Equipment / Availability
# ---------------------------------------------------------------------------


class AvailabilityResponse(CamelORMModel):
    id: str
    equipment_id: str
    status: AvailabilityStatus
    earliest_date: datetime | None = None
    last_updated: datetime | None = None


class AvailabilityUpdate(CamelModel):
    status: AvailabilityStatus
    earliest_date: datetime | None = None


class EquipmentResponse(CamelORMModel):
    id: str
    vendor_id: str
    type: EquipmentType
    size_class: SizeClass | None = None
    make: str | None = None
    model: str | None = None
    year: int | None = None
    rate_hour_min: float | None = None
    rate_hour_max: float | None = None
    rate_day_min: float | None = None
    rate_day_max: float | None = None
    notes: str | None = None
    image_url: str | None = None
    availability: AvailabilityResponse | None = None


class VendorResponse(CamelORMModel):
    id: str
    name: str
    phone: str
    email: str
    website: str | None = None
    yard_address: str
    yard_lat: float | None = None
    yard_lng: float | None = None
    plan_status: PlanStatus
    is_sponsored: bool
    is_active: bool
    billing_status: BillingStatus
    onboarding_date: datetime | None = None
    last_contacted_at: datetime | None = None
    admin_notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class VendorProfileResponse(VendorResponse):
    equipment: list[EquipmentResponse] = []


class VendorAdminListItem(VendorResponse):
    equipment_count: int = 0
    lead_request_count: int = 0
    contact_event_count: int = 0


class VendorAdminUpdate(CamelModel):
    is_sponsored: bool | None = None
    is_active: bool | None = None
    plan_status: PlanStatus | None = None
    billing_status: BillingStatus | None = None
    admin_notes: str | None = None
    last_contacted_at: datetime | None = None

    @field_validator("is_sponsored", "is_active", "plan_status", "billing_status", mode="before")
    @classmethod
    def not_null(cls, v):
        return _reject_null(v)


class VendorProfileUpdate(CamelModel):
    """Vendor self-service edit of the public profile. Website may be cleared."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    phone: str | None = Field(default=None, min_length=1, max_length=50)
    website: str | None = Field(default=None, max_length=500)
    yard_address: str | None = Field(default=None, min_length=1, max_length=500)
    yard_lat: float | None = Field(default=None, ge=-90, le=90)
    yard_lng: float | None = Field(default=None, ge=-180, le=180)

    @field_validator("name", "phone", "yard_address", "yard_lat", "yard_lng", mode="before")
    @classmethod
    def not_null(cls, v):
        return _reject_null(v)


class VendorContactResponse(CamelORMModel):
    id: str
    name: str
    phone: str
    email: str
    website: str | None = None
    yard_address: str
    yard_lat: float | None = None
    yard_lng: float | None = None
    is_sponsored: bool


class EquipmentDetailResponse(EquipmentResponse):
    """Public listing detail: the machine, its vendor and how fresh the status is."""

    vendor: VendorContactResponse
    freshness: str


# ---------------------------------------------------------------------------
# Billing
# ---------------------------------------------------------------------------


class EventTypeCountsResponse(CamelORMModel):
    total: int
    call: int
    text: int
    email: int
    website: int
    request: int


class VendorBillingRowResponse(CamelModel):
    vendor_id: str
    vendor_name: str
    vendor_email: str
    cpc_rate: Money
    billing_status: BillingStatus
    onboarding_date: datetime | None = None
    last_contacted_at: datetime | None = None
    admin_notes: str | None = None
    this_week: EventTypeCountsResponse
    this_month: EventTypeCountsResponse
    amount_due_this_month: Money


class BillingTotalsResponse(CamelModel):
    total_billable_this_week: int
    total_billable_this_month: int
    total_revenue: Money


class BillingPeriodResponse(CamelModel):
    week_start: datetime
    month_start: datetime


class BillingReportResponse(CamelModel):
    vendors: list[VendorBillingRowResponse]
    totals: BillingTotalsResponse
    period: BillingPeriodResponse


class CpcRateUpdate(CamelModel):
    # Mirrors the Numeric(10, 2) column; Infinity and NaN are rejected
    cpc_rate: Decimal = Field(ge=0, max_digits=10, decimal_places=2)


class VendorBillingResponse(CamelModel):
    vendor_id: str
    cpc_rate: Money


class BillingStatusUpdate(CamelModel):
    status: BillingStatus


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------


class AdminAnalyticsResponse(CamelModel):
    total_vendors: int
    active_vendors: int
    total_equipment: int
    total_leads: int
    total_contact_events: int
    pending_reports: int


class VendorBillingSummaryResponse(CamelModel):
    cpc_rate: Money
    billing_status: BillingStatus
    this_week_billable: int
    this_month_billable: int
    estimated_charge_this_month: Money


class Last30DaysResponse(CamelModel):
    contact_clicks: int
    lead_requests: int


class VendorAnalyticsResponse(CamelModel):
    total_contact_clicks: int
    call_clicks: int
    text_clicks: int
    email_clicks: int
    website_clicks: int
    request_clicks: int
    lead_requests: int
    last_30_days: Last30DaysResponse = Field(alias="last30Days")
    billing: VendorBillingSummaryResponse
