"""Vendor self-service routes (authenticated vendor account).

GET /api/vendors/me                                   profile with equipment
PUT /api/vendors/me                                   edit contact and yard details
GET /api/vendors/me/analytics                         clicks, leads, billing
PUT /api/vendors/me/equipment/{id}/availability       one-tap availability
"""

import json
import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from rigfinder.app.config import get_settings
from rigfinder.app.routes.auth import get_current_user_dep, get_current_vendor
from rigfinder.domain.enums import AuditAction
from rigfinder.domain.errors import EquipmentNotFoundError
from rigfinder.domain.models import Equipment, User, Vendor
from rigfinder.domain.schemas import (
    AvailabilityResponse,
    AvailabilityUpdate,
    Last30DaysResponse,
    VendorAnalyticsResponse,
    VendorBillingSummaryResponse,
    VendorProfileResponse,
    VendorProfileUpdate,
    VendorResponse,
)
from rigfinder.infra.clock import utcnow
from rigfinder.infra.database import get_db
from rigfinder.services.audit_log import record_audit
from rigfinder.services.availability import apply_availability_update, new_availability
from rigfinder.services.vendor_analytics import VendorAnalyticsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/vendors", tags=["vendors"])


@router.get("/me", response_model=VendorProfileResponse)
async def get_my_profile(
    vendor: Vendor = Depends(get_current_vendor),
    db: AsyncSession = Depends(get_db),
):
    """Return the current vendor's profile with equipment and availability."""
    result = await db.execute(
        select(Vendor)
        .where(Vendor.id == vendor.id)
        .options(selectinload(Vendor.equipment).selectinload(Equipment.availability))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


@router.put("/me", response_model=VendorResponse)
async def update_my_profile(
    body: VendorProfileUpdate,
    vendor: Vendor = Depends(get_current_vendor),
    user: User = Depends(get_current_user_dep),
    db: AsyncSession = Depends(get_db),
):
    """Edit name, phone, website or yard location. Omitted fields are left as is."""
    changes = body.model_dump(exclude_unset=True)
    for key, value in changes.items():
        setattr(vendor, key, value)

    await record_audit(
        db,
        AuditAction.LISTING_EDIT,
        f"Vendor profile updated: {json.dumps(changes, sort_keys=True)}",
        vendor_id=vendor.id,
        user_id=user.id,
    )
    await db.commit()
    await db.refresh(vendor)

    logger.info("Vendor %s updated profile fields %s", vendor.id, sorted(changes))
    return vendor


@router.get("/me/analytics", response_model=VendorAnalyticsResponse)
async def get_my_analytics(
    vendor: Vendor = Depends(get_current_vendor),
    db: AsyncSession = Depends(get_db),
):
    service = VendorAnalyticsService(db, default_rate=get_settings().default_cpc_rate)
    analytics = await service.analytics_for(vendor)
    clicks = analytics.clicks
    billing = analytics.billing

    return VendorAnalyticsResponse(
        total_contact_clicks=clicks.total,
        call_clicks=clicks.call,
        text_clicks=clicks.text,
        email_clicks=clicks.email,
        website_clicks=clicks.website,
        request_clicks=clicks.request,
        lead_requests=analytics.lead_requests,
        last_30_days=Last30DaysResponse(
            contact_clicks=analytics.last_30_days_contact_clicks,
            lead_requests=analytics.last_30_days_lead_requests,
        ),
        billing=VendorBillingSummaryResponse(
            cpc_rate=billing.cpc_rate,
            billing_status=billing.billing_status,
            this_week_billable=billing.this_week_billable,
            this_month_billable=billing.this_month_billable,
            estimated_charge_this_month=billing.estimated_charge_this_month,
        ),
    )


@router.put("/me/equipment/{equipment_id}/availability", response_model=AvailabilityResponse)
async def update_my_availability(
    equipment_id: str,
    body: AvailabilityUpdate,
    vendor: Vendor = Depends(get_current_vendor),
    user: User = Depends(get_current_user_dep),
    db: AsyncSession = Depends(get_db),
):
    """Set availability on one of the vendor's own listings."""
    result = await db.execute(
        select(Equipment)
        .where(Equipment.id == equipment_id, Equipment.vendor_id == vendor.id)
        .options(selectinload(Equipment.availability))
    )
    equipment = result.scalar_one_or_none()
    if equipment is None:
        raise EquipmentNotFoundError(equipment_id)

    now = utcnow()
    availability = equipment.availability
    if availability is None:
        availability = new_availability(equipment.id, now)
        db.add(availability)
    apply_availability_update(availability, body.status, body.earliest_date, now)

    await record_audit(
        db,
        AuditAction.AVAILABILITY_UPDATE,
        f"Set availability for equipment {equipment_id} to {body.status.value}",
        vendor_id=vendor.id,
        user_id=user.id,
    )
    await db.commit()
    await db.refresh(availability)
    return availability
