"""Public contractor submissions: availability requests and listing reports."""

import logging
import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rigfinder.domain.enums import ReportStatus
from rigfinder.domain.errors import (
    EquipmentNotFoundError,
    InvalidRequestError,
    VendorNotFoundError,
)
from rigfinder.domain.models import Equipment, LeadRequest, Report, Vendor
from rigfinder.domain.schemas import (
    LeadRequestCreate,
    LeadRequestResponse,
    ReportCreate,
    ReportResponse,
)
from rigfinder.infra.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["leads"])


@router.post("/leads", response_model=LeadRequestResponse, status_code=201)
async def create_lead_request(
    body: LeadRequestCreate,
    db: AsyncSession = Depends(get_db),
):
    """Contractor asks a vendor about availability."""
    if await db.get(Vendor, body.vendor_id) is None:
        raise VendorNotFoundError(body.vendor_id)
    if body.equipment_id:
        equipment = await db.get(Equipment, body.equipment_id)
        if equipment is None:
            raise EquipmentNotFoundError(body.equipment_id)

    lead = LeadRequest(
        id=str(uuid.uuid4()),
        vendor_id=body.vendor_id,
        equipment_id=body.equipment_id or None,
        requester_name=body.requester_name,
        requester_phone=body.requester_phone,
        requester_email=body.requester_email,
        message=body.message,
        jobsite_location_text=body.jobsite_location_text,
        radius=body.radius,
        need_date=body.need_date.value if body.need_date else None,
    )
    db.add(lead)
    await db.commit()
    await db.refresh(lead)

    logger.info("Lead request %s for vendor %s", lead.id, lead.vendor_id)
    return lead


@router.post("/reports", response_model=ReportResponse, status_code=201)
async def create_report(
    body: ReportCreate,
    db: AsyncSession = Depends(get_db),
):
    """Flag a listing as outdated or wrong."""
    if not body.equipment_id and not body.vendor_id:
        raise InvalidRequestError("Either equipmentId or vendorId is required")

    if body.equipment_id and await db.get(Equipment, body.equipment_id) is None:
        raise EquipmentNotFoundError(body.equipment_id)
    if body.vendor_id and await db.get(Vendor, body.vendor_id) is None:
        raise VendorNotFoundError(body.vendor_id)

    report = Report(
        id=str(uuid.uuid4()),
        equipment_id=body.equipment_id or None,
        vendor_id=body.vendor_id or None,
        reason=body.reason,
        status=ReportStatus.PENDING.value,
    )
    db.add(report)
    await db.commit()
    await db.refresh(report)

    logger.info(
        "Report %s filed (equipment=%s vendor=%s): %s",
        report.id,
        report.equipment_id,
        report.vendor_id,
        report.reason,
    )
    return report
