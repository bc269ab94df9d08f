"""Contact Event Ledger: append-only store behind vendor invoicing.

Every contact action a contractor takes on a listing lands here. The
ledger is the only thing the billing aggregator reads, so the write path
has one hard guarantee: at most one billable row per dedupe key. The key
already embeds the 30-minute bucket and carries a unique index, so the
write is "insert, and treat a uniqueness violation as a duplicate". The
pre-insert lookup is only a fast path; the index is what holds under
concurrent writers across processes.

Two write paths share the table:
    record()         - deduplicated logging (rate-limited at the route)
    record_legacy()  - plain click tracking, always billable, no dedupe key
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rigfinder.domain.enums import ContactEventType
from rigfinder.domain.errors import EquipmentNotFoundError, VendorNotFoundError
from rigfinder.domain.models import ContactEvent, Equipment, Vendor
from rigfinder.infra.clock import Clock, utcnow
from rigfinder.services.dedupe import (
    DEDUPE_WINDOW_SECONDS,
    fingerprint,
    synthesize_session_id,
    time_bucket,
)

logger = logging.getLogger(__name__)

DUPLICATE_REASON = "duplicate_within_window"


@dataclass
class ContactContext:
    """Hashed client identity plus the search that led to the click."""

    ip_hash: str | None = None
    user_agent_hash: str | None = None
    search_location_text: str | None = None
    search_radius: float | None = None
    need_date: str | None = None
    referrer: str | None = None


@dataclass(frozen=True)
class RecordResult:
    billable: bool
    event_id: str | None
    session_id: str
    reason: str | None = None


class ContactLedger:
    """Writes contact events with at-most-once billing per dedupe window."""

    def __init__(
        self,
        db: AsyncSession,
        *,
        clock: Clock = utcnow,
        window_seconds: int = DEDUPE_WINDOW_SECONDS,
    ):
        self.db = db
        self._clock = clock
        self.window_seconds = window_seconds

    async def _ensure_references(self, vendor_id: str, equipment_id: str | None) -> None:
        vendor = await self.db.get(Vendor, vendor_id)
        if vendor is None:
            raise VendorNotFoundError(vendor_id)
        if equipment_id:
            equipment = await self.db.get(Equipment, equipment_id)
            if equipment is None:
                raise EquipmentNotFoundError(equipment_id)

    async def record(
        self,
        vendor_id: str,
        equipment_id: str | None,
        event_type: ContactEventType,
        session_id: str | None,
        context: ContactContext | None = None,
    ) -> RecordResult:
        """Log a contact action, billable unless already seen this bucket.

        Raises:
            VendorNotFoundError / EquipmentNotFoundError before any hashing.
            Any persistence error other than the dedupe uniqueness violation.
        """
        await self._ensure_references(vendor_id, equipment_id)

        context = context or ContactContext()
        now = self._clock()

        if not session_id:
            session_id = synthesize_session_id(
                context.ip_hash or "", context.user_agent_hash or "", now
            )

        bucket = time_bucket(now, self.window_seconds)
        dedupe_key = fingerprint(vendor_id, equipment_id, event_type, session_id, bucket)

        window_start = now - timedelta(seconds=self.window_seconds)
        existing = await self.db.execute(
            select(ContactEvent.id).where(
                ContactEvent.dedupe_key == dedupe_key,
                ContactEvent.created_at >= window_start,
            ).limit(1)
        )
        if existing.scalar_one_or_none() is not None:
            logger.debug("Duplicate contact event %s... for vendor %s", dedupe_key[:8], vendor_id)
            return RecordResult(
                billable=False, event_id=None, session_id=session_id, reason=DUPLICATE_REASON
            )

        event = ContactEvent(
            id=str(uuid.uuid4()),
            vendor_id=vendor_id,
            equipment_id=equipment_id or None,
            event_type=ContactEventType(event_type).value,
            session_id=session_id,
            ip_hash=context.ip_hash,
            user_agent_hash=context.user_agent_hash,
            search_location_text=context.search_location_text,
            search_radius=context.search_radius,
            need_date=context.need_date,
            referrer=context.referrer,
            dedupe_key=dedupe_key,
            is_billable=True,
            created_at=now,
        )
        try:
            async with self.db.begin_nested():
                self.db.add(event)
        except IntegrityError:
            # A concurrent request inserted the same key between our lookup
            # and insert; the savepoint rolled back only our row.
            logger.info("Dedupe race resolved for key %s... (vendor %s)", dedupe_key[:8], vendor_id)
            return RecordResult(
                billable=False, event_id=None, session_id=session_id, reason=DUPLICATE_REASON
            )

        logger.info(
            "Billable %s event %s for vendor %s (session %s...)",
            event.event_type,
            event.id,
            vendor_id,
            session_id[:8],
        )
        return RecordResult(billable=True, event_id=event.id, session_id=session_id)

    async def record_legacy(
        self,
        vendor_id: str,
        equipment_id: str | None,
        event_type: ContactEventType,
        search_params_json: str | None = None,
    ) -> ContactEvent:
        """Plain click tracking: always appends a billable row."""
        await self._ensure_references(vendor_id, equipment_id)

        event = ContactEvent(
            id=str(uuid.uuid4()),
            vendor_id=vendor_id,
            equipment_id=equipment_id or None,
            event_type=ContactEventType(event_type).value,
            search_params_json=search_params_json,
            is_billable=True,
            created_at=self._clock(),
        )
        self.db.add(event)
        await self.db.flush()

        logger.info("Legacy %s event %s for vendor %s", event.event_type, event.id, vendor_id)
        return event
