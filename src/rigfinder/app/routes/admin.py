"""Admin API routes -- vendor management, billing and listing reports.

Every route requires an authenticated admin. Each action appends a
best-effort audit-log row.
"""

import json
import logging
from dataclasses import asdict
from datetime import datetime
from enum import Enum

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from rigfinder.app.config import get_settings
from rigfinder.app.routes.auth import require_role
from rigfinder.domain.enums import AuditAction, ReportStatus, UserRole
from rigfinder.domain.errors import NotFoundError, VendorNotFoundError
from rigfinder.domain.models import (
    ContactEvent,
    Equipment,
    LeadRequest,
    Report,
    User,
    Vendor,
)
from rigfinder.domain.schemas import (
    AdminAnalyticsResponse,
    BillingReportResponse,
    BillingStatusUpdate,
    CpcRateUpdate,
    ReportAdminResponse,
    ReportResponse,
    ReportUpdate,
    VendorAdminListItem,
    VendorAdminUpdate,
    VendorBillingResponse,
    VendorResponse,
)
from rigfinder.infra.clock import as_naive_utc, utcnow
from rigfinder.infra.database import get_db
from rigfinder.services.audit_log import record_audit
from rigfinder.services.billing_aggregator import (
    BillingAggregator,
    update_billing_status,
    update_cpc_rate,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/admin", tags=["admin"])

require_admin = require_role(UserRole.ADMIN)


async def _counts_by_vendor(db: AsyncSession, model) -> dict[str, int]:
    result = await db.execute(
        select(model.vendor_id, func.count()).group_by(model.vendor_id)
    )
    return {vendor_id: count for vendor_id, count in result.all()}


async def _count(db: AsyncSession, model, *conditions) -> int:
    result = await db.execute(select(func.count()).select_from(model).where(*conditions))
    return result.scalar() or 0


# ---------------------------------------------------------------------------
# Vendors
# ---------------------------------------------------------------------------


@router.get("/vendors", response_model=list[VendorAdminListItem])
async def list_vendors(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """All vendors, newest first, with equipment/lead/contact counts."""
    result = await db.execute(select(Vendor).order_by(Vendor.created_at.desc(), Vendor.id))
    vendors = result.scalars().all()

    equipment_counts = await _counts_by_vendor(db, Equipment)
    lead_counts = await _counts_by_vendor(db, LeadRequest)
    event_counts = await _counts_by_vendor(db, ContactEvent)

    items = [
        VendorAdminListItem(
            **VendorResponse.model_validate(vendor).model_dump(),
            equipment_count=equipment_counts.get(vendor.id, 0),
            lead_request_count=lead_counts.get(vendor.id, 0),
            contact_event_count=event_counts.get(vendor.id, 0),
        )
        for vendor in vendors
    ]

    await record_audit(db, AuditAction.ADMIN_ACTION, "Listed all vendors", user_id=admin.id)
    await db.commit()
    return items


@router.put("/vendors/{vendor_id}", response_model=VendorResponse)
async def update_vendor(
    vendor_id: str,
    body: VendorAdminUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Update sponsorship, activation, plan, billing status or notes."""
    vendor = await db.get(Vendor, vendor_id)
    if vendor is None:
        raise VendorNotFoundError(vendor_id)

    changes = body.model_dump(exclude_unset=True, mode="json")
    for key, value in body.model_dump(exclude_unset=True).items():
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, datetime):
            value = as_naive_utc(value)
        setattr(vendor, key, value)

    await record_audit(
        db,
        AuditAction.ADMIN_ACTION,
        f"Admin updated vendor {vendor_id}: {json.dumps(changes, sort_keys=True)}",
        vendor_id=vendor_id,
        user_id=admin.id,
    )
    await db.commit()
    await db.refresh(vendor)

    logger.info("Admin %s updated vendor %s: %s", admin.id, vendor_id, sorted(changes))
    return vendor


@router.put("/vendors/{vendor_id}/billing-status", response_model=VendorResponse)
async def set_billing_status(
    vendor_id: str,
    body: BillingStatusUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    vendor = await update_billing_status(db, vendor_id, body.status)
    await record_audit(
        db,
        AuditAction.ADMIN_ACTION,
        f"Updated billing status for vendor {vendor_id} to {body.status.value}",
        vendor_id=vendor_id,
        user_id=admin.id,
    )
    await db.commit()
    await db.refresh(vendor)
    return vendor


# ---------------------------------------------------------------------------
# Billing
# ---------------------------------------------------------------------------


@router.get("/billing", response_model=BillingReportResponse)
async def get_billing_report(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Billable clicks this week/month and amount due per vendor."""
    aggregator = BillingAggregator(db, default_rate=get_settings().default_cpc_rate)
    report = await aggregator.billing_report()

    await record_audit(db, AuditAction.ADMIN_ACTION, "Viewed billing report", user_id=admin.id)
    await db.commit()
    return BillingReportResponse.model_validate(asdict(report))


@router.put("/billing/{vendor_id}", response_model=VendorBillingResponse)
async def set_cpc_rate(
    vendor_id: str,
    body: CpcRateUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create or update a vendor's cost-per-click rate."""
    billing = await update_cpc_rate(db, vendor_id, body.cpc_rate)
    await record_audit(
        db,
        AuditAction.ADMIN_ACTION,
        f"Updated CPC rate for vendor {vendor_id} to ${billing.cpc_rate}",
        vendor_id=vendor_id,
        user_id=admin.id,
    )
    await db.commit()
    return VendorBillingResponse(vendor_id=vendor_id, cpc_rate=float(billing.cpc_rate))


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------


@router.get("/analytics", response_model=AdminAnalyticsResponse)
async def get_analytics(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    analytics = AdminAnalyticsResponse(
        total_vendors=await _count(db, Vendor),
        active_vendors=await _count(db, Vendor, Vendor.is_active.is_(True)),
        total_equipment=await _count(db, Equipment),
        total_leads=await _count(db, LeadRequest),
        total_contact_events=await _count(db, ContactEvent),
        pending_reports=await _count(db, Report, Report.status == ReportStatus.PENDING.value),
    )

    await record_audit(db, AuditAction.ADMIN_ACTION, "Viewed admin analytics", user_id=admin.id)
    await db.commit()
    return analytics


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


@router.get("/reports", response_model=list[ReportAdminResponse])
async def list_reports(
    status: ReportStatus | None = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Listing reports, newest first, with equipment title and vendor name."""
    stmt = select(Report).order_by(Report.created_at.desc(), Report.id).limit(limit).offset(offset)
    if status is not None:
        stmt = stmt.where(Report.status == status.value)
    reports = (await db.execute(stmt)).scalars().all()

    equipment_ids = {r.equipment_id for r in reports if r.equipment_id}
    vendor_ids = {r.vendor_id for r in reports if r.vendor_id and not r.equipment_id}

    equipment_by_id: dict[str, Equipment] = {}
    if equipment_ids:
        eq_result = await db.execute(
            select(Equipment)
            .where(Equipment.id.in_(equipment_ids))
            .options(selectinload(Equipment.vendor))
        )
        equipment_by_id = {eq.id: eq for eq in eq_result.scalars().all()}

    vendor_names: dict[str, str] = {}
    if vendor_ids:
        v_result = await db.execute(select(Vendor.id, Vendor.name).where(Vendor.id.in_(vendor_ids)))
        vendor_names = dict(v_result.all())

    enriched = []
    for report in reports:
        equipment_title = None
        vendor_name = None
        if report.equipment_id:
            equipment = equipment_by_id.get(report.equipment_id)
            if equipment is not None:
                equipment_title = equipment.title
                vendor_name = equipment.vendor.name
        elif report.vendor_id:
            vendor_name = vendor_names.get(report.vendor_id)

        enriched.append(
            ReportAdminResponse(
                **ReportResponse.model_validate(report).model_dump(),
                equipment_title=equipment_title,
                vendor_name=vendor_name,
            )
        )

    await record_audit(
        db,
        AuditAction.ADMIN_ACTION,
        f"Listed reports with status: {status.value if status else 'all'}",
        user_id=admin.id,
    )
    await db.commit()
    return enriched


@router.put("/reports/{report_id}", response_model=ReportResponse)
async def update_report(
    report_id: str,
    body: ReportUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Mark a report reviewed or dismissed (or back to pending)."""
    report = await db.get(Report, report_id)
    if report is None:
        raise NotFoundError("Report not found")

    report.status = body.status.value
    report.reviewed_at = utcnow() if body.status is not ReportStatus.PENDING else None

    await record_audit(
        db,
        AuditAction.ADMIN_ACTION,
        f"Updated report {report_id} status to {body.status.value}",
        user_id=admin.id,
    )
    await db.commit()
    await db.refresh(report)
    return report
