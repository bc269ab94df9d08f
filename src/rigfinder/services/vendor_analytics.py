"""Vendor-facing analytics: click counts, lead counts and estimated charges."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rigfinder.domain.enums import BillingStatus, ContactEventType
from rigfinder.domain.models import DEFAULT_CPC_RATE, ContactEvent, LeadRequest, Vendor, VendorBilling
from rigfinder.infra.clock import Clock, utcnow
from rigfinder.services.billing_aggregator import (
    CENTS,
    EventTypeCounts,
    amount_due,
    current_billing_period,
    effective_cpc_rate,
)

RECENT_DAYS = 30


@dataclass
class VendorBillingSummary:
    cpc_rate: Decimal
    billing_status: BillingStatus
    this_week_billable: int
    this_month_billable: int
    estimated_charge_this_month: Decimal


@dataclass
class VendorAnalytics:
    clicks: EventTypeCounts
    lead_requests: int
    last_30_days_contact_clicks: int
    last_30_days_lead_requests: int
    billing: VendorBillingSummary


class VendorAnalyticsService:
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

    async def _count(self, model, *conditions) -> int:
        result = await self.db.execute(select(func.count()).select_from(model).where(*conditions))
        return result.scalar() or 0

    async def analytics_for(self, vendor: Vendor) -> VendorAnalytics:
        now = self._clock()
        since_recent = now - timedelta(days=RECENT_DAYS)
        period = current_billing_period(now)

        # All-time clicks by type (billable or not)
        clicks = EventTypeCounts()
        by_type = await self.db.execute(
            select(ContactEvent.event_type, func.count())
            .where(ContactEvent.vendor_id == vendor.id)
            .group_by(ContactEvent.event_type)
        )
        for event_type, count in by_type.all():
            clicks.add(ContactEventType(event_type), count)

        lead_requests = await self._count(LeadRequest, LeadRequest.vendor_id == vendor.id)
        recent_clicks = await self._count(
            ContactEvent,
            ContactEvent.vendor_id == vendor.id,
            ContactEvent.created_at >= since_recent,
        )
        recent_leads = await self._count(
            LeadRequest,
            LeadRequest.vendor_id == vendor.id,
            LeadRequest.created_at >= since_recent,
        )
        week_billable = await self._billable_since(vendor.id, period.week_start)
        month_billable = await self._billable_since(vendor.id, period.month_start)

        stored_rate = await self.db.scalar(
            select(VendorBilling.cpc_rate).where(VendorBilling.vendor_id == vendor.id)
        )
        cpc_rate = effective_cpc_rate(stored_rate, self.default_rate)
        status = BillingStatus(vendor.billing_status)

        return VendorAnalytics(
            clicks=clicks,
            lead_requests=lead_requests,
            last_30_days_contact_clicks=recent_clicks,
            last_30_days_lead_requests=recent_leads,
            billing=VendorBillingSummary(
                cpc_rate=cpc_rate,
                billing_status=status,
                this_week_billable=week_billable,
                this_month_billable=month_billable,
                estimated_charge_this_month=amount_due(status, month_billable, cpc_rate),
            ),
        )

    async def _billable_since(self, vendor_id: str, since: datetime) -> int:
        return await self._count(
            ContactEvent,
            ContactEvent.vendor_id == vendor_id,
            ContactEvent.is_billable.is_(True),
            ContactEvent.created_at >= since,
        )
