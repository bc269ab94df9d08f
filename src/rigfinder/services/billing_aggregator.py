"""Billing Aggregator: pay-per-click amounts owed, computed on read.

Nothing here is stored. Every report is a pure function of the contact
ledger, each vendor's billing status and each vendor's CPC rate at query
time, so reclassifying an event changes every later report automatically.

Rules:
    - Only is_billable events count.
    - Every vendor gets a row; non-ACTIVE vendors still show raw counts
      but owe 0.
    - Grand totals include ACTIVE vendors only.
    - A vendor without a VendorBilling row is billed at the default rate.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from rigfinder.domain.enums import BillingStatus, ContactEventType
from rigfinder.domain.errors import VendorNotFoundError
from rigfinder.domain.models import DEFAULT_CPC_RATE, ContactEvent, Vendor, VendorBilling
from rigfinder.infra.clock import Clock, utcnow

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")

# Explicit event type -> counter field. Checked below so a new event type
# fails at import instead of silently not being counted.
_COUNTER_FIELDS: dict[ContactEventType, str] = {
    ContactEventType.CALL: "call",
    ContactEventType.TEXT: "text",
    ContactEventType.EMAIL: "email",
    ContactEventType.WEBSITE: "website",
    ContactEventType.REQUEST: "request",
}
if set(_COUNTER_FIELDS) != set(ContactEventType):
    raise RuntimeError("Every ContactEventType needs a billing counter field")


@dataclass
class EventTypeCounts:
    total: int = 0
    call: int = 0
    text: int = 0
    email: int = 0
    website: int = 0
    request: int = 0

    def add(self, event_type: ContactEventType, count: int = 1) -> None:
        field_name = _COUNTER_FIELDS[ContactEventType(event_type)]
        setattr(self, field_name, getattr(self, field_name) + count)
        self.total += count


@dataclass(frozen=True)
class BillingPeriod:
    week_start: datetime
    month_start: datetime


@dataclass
class VendorBillingRow:
    vendor_id: str
    vendor_name: str
    vendor_email: str
    cpc_rate: Decimal
    billing_status: BillingStatus
    onboarding_date: datetime | None
    last_contacted_at: datetime | None
    admin_notes: str | None
    this_week: EventTypeCounts = field(default_factory=EventTypeCounts)
    this_month: EventTypeCounts = field(default_factory=EventTypeCounts)
    amount_due_this_month: Decimal = Decimal("0.00")


@dataclass(frozen=True)
class BillingTotals:
    total_billable_this_week: int
    total_billable_this_month: int
    total_revenue: Decimal


@dataclass
class BillingReport:
    vendors: list[VendorBillingRow]
    totals: BillingTotals
    period: BillingPeriod


def current_billing_period(now: datetime) -> BillingPeriod:
    """Week starts Sunday 00:00, month on the 1st at 00:00 (UTC)."""
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    days_since_sunday = (midnight.weekday() + 1) % 7
    return BillingPeriod(
        week_start=midnight - timedelta(days=days_since_sunday),
        month_start=midnight.replace(day=1),
    )


def amount_due(status: BillingStatus | str, billable_count: int, cpc_rate: Decimal) -> Decimal:
    """Money owed for *billable_count* clicks; zero unless billing is ACTIVE."""
    if BillingStatus(status) is not BillingStatus.ACTIVE:
        return Decimal("0.00")
    if cpc_rate < 0:
        raise ValueError("cpc_rate must be non-negative")
    return (Decimal(billable_count) * Decimal(cpc_rate)).quantize(CENTS)


def effective_cpc_rate(stored_rate: Decimal | None, default_rate: Decimal) -> Decimal:
    """The vendor's configured rate, or *default_rate* when none is set."""
    if stored_rate is not None:
        return Decimal(stored_rate).quantize(CENTS)
    return default_rate


class BillingAggregator:
    """Reads the ledger and vendor billing config to produce invoices-to-be."""

    def __init__(
        self,
        db: AsyncSession,
        *,
        default_rate: Decimal = DEFAULT_CPC_RATE,
        clock: Clock = utcnow,
    ):
        self.db = db
        self.default_rate = Decimal(default_rate).quantize(CENTS)
        self._clock = clock

    async def _billable_counts_since(self, since: datetime) -> dict[str, EventTypeCounts]:
        result = await self.db.execute(
            select(ContactEvent.vendor_id, ContactEvent.event_type, func.count())
            .where(
                ContactEvent.is_billable.is_(True),
                ContactEvent.created_at >= since,
            )
            .group_by(ContactEvent.vendor_id, ContactEvent.event_type)
        )
        by_vendor: dict[str, EventTypeCounts] = {}
        for vendor_id, event_type, count in result.all():
            by_vendor.setdefault(vendor_id, EventTypeCounts()).add(event_type, count)
        return by_vendor

    async def billing_report(self, period: BillingPeriod | None = None) -> BillingReport:
        """Per-vendor billable counts and amounts due for the week/month."""
        period = period or current_billing_period(self._clock())

        vendors_result = await self.db.execute(
            select(Vendor).options(selectinload(Vendor.billing)).order_by(Vendor.name)
        )
        vendors = vendors_result.scalars().all()

        week_counts = await self._billable_counts_since(period.week_start)
        month_counts = await self._billable_counts_since(period.month_start)

        rows: list[VendorBillingRow] = []
        total_week = 0
        total_month = 0
        total_revenue = Decimal("0.00")

        for vendor in vendors:
            status = BillingStatus(vendor.billing_status)
            stored = vendor.billing.cpc_rate if vendor.billing is not None else None
            cpc_rate = effective_cpc_rate(stored, self.default_rate)
            this_week = week_counts.get(vendor.id, EventTypeCounts())
            this_month = month_counts.get(vendor.id, EventTypeCounts())
            due = amount_due(status, this_month.total, cpc_rate)

            rows.append(
                VendorBillingRow(
                    vendor_id=vendor.id,
                    vendor_name=vendor.name,
                    vendor_email=vendor.email,
                    cpc_rate=cpc_rate,
                    billing_status=status,
                    onboarding_date=vendor.onboarding_date,
                    last_contacted_at=vendor.last_contacted_at,
                    admin_notes=vendor.admin_notes,
                    this_week=this_week,
                    this_month=this_month,
                    amount_due_this_month=due,
                )
            )

            # Events for non-active vendors happened but are not billable
            if status is BillingStatus.ACTIVE:
                total_week += this_week.total
                total_month += this_month.total
                total_revenue += due

        logger.info(
            "Billing report: %d vendors, %d billable this month, revenue %s",
            len(rows),
            total_month,
            total_revenue,
        )
        return BillingReport(
            vendors=rows,
            totals=BillingTotals(
                total_billable_this_week=total_week,
                total_billable_this_month=total_month,
                total_revenue=total_revenue,
            ),
            period=period,
        )


async def update_cpc_rate(db: AsyncSession, vendor_id: str, cpc_rate: Decimal) -> VendorBilling:
    """Create or update a vendor's CPC rate."""
    cpc_rate = Decimal(cpc_rate)
    if cpc_rate < 0:
        raise ValueError("cpc_rate must be non-negative")

    vendor = await db.get(Vendor, vendor_id)
    if vendor is None:
        raise VendorNotFoundError(vendor_id)

    result = await db.execute(select(VendorBilling).where(VendorBilling.vendor_id == vendor_id))
    billing = result.scalar_one_or_none()
    if billing is None:
        billing = VendorBilling(vendor_id=vendor_id, cpc_rate=cpc_rate.quantize(CENTS))
        db.add(billing)
    else:
        billing.cpc_rate = cpc_rate.quantize(CENTS)
    await db.flush()

    logger.info("CPC rate for vendor %s set to %s", vendor_id, billing.cpc_rate)
    return billing


async def update_billing_status(db: AsyncSession, vendor_id: str, status: BillingStatus) -> Vendor:
    """Switch a vendor between ACTIVE, PAUSED and OPTED_OUT billing."""
    vendor = await db.get(Vendor, vendor_id)
    if vendor is None:
        raise VendorNotFoundError(vendor_id)

    vendor.billing_status = BillingStatus(status).value
    await db.flush()

    logger.info("Billing status for vendor %s set to %s", vendor_id, vendor.billing_status)
    return vendor
