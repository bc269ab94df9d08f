"""Contact-event routes -- the billable click stream.

POST /api/contact-events/log  deduplicated, rate-limited logging
POST /api/contact-events      legacy click tracking (no dedupe)

Both are public: contractors never log in. Client IP and user agent are
hashed before they reach the ledger.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from rigfinder.app.config import get_settings
from rigfinder.domain.errors import RateLimitedError
from rigfinder.domain.schemas import (
    ContactEventCreate,
    ContactEventResponse,
    LogContactEventRequest,
    LogContactEventResponse,
)
from rigfinder.infra.database import get_db
from rigfinder.services.contact_ledger import ContactContext, ContactLedger
from rigfinder.services.identity_hasher import hash_identifier
from rigfinder.services.rate_limiter import FixedWindowRateLimiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/contact-events", tags=["contact-events"])


def client_ip(request: Request) -> str:
    """Best-effort client address: first X-Forwarded-For hop, then X-Real-IP."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return "unknown"


def get_rate_limiter(request: Request) -> FixedWindowRateLimiter:
    return request.app.state.rate_limiter


@router.post("/log", response_model=LogContactEventResponse, status_code=201)
async def log_contact_event(
    body: LogContactEventRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
    limiter: FixedWindowRateLimiter = Depends(get_rate_limiter),
):
    """Log a contact action; duplicates within the window come back 200, not billable."""
    ip_hash = hash_identifier(client_ip(request))

    decision = limiter.check(f"ip:{ip_hash}")
    if not decision.allowed:
        raise RateLimitedError()

    context = ContactContext(
        ip_hash=ip_hash,
        user_agent_hash=hash_identifier(request.headers.get("user-agent", "unknown")),
        search_location_text=body.search_location_text,
        search_radius=body.search_radius,
        need_date=body.need_date,
        referrer=body.referrer or request.headers.get("referer"),
    )

    ledger = ContactLedger(db, window_seconds=get_settings().dedupe_window_seconds)
    result = await ledger.record(
        vendor_id=body.vendor_id,
        equipment_id=body.equipment_id,
        event_type=body.event_type,
        session_id=body.session_id,
        context=context,
    )
    await db.commit()

    if not result.billable:
        response.status_code = 200

    return LogContactEventResponse(
        billable=result.billable,
        event_id=result.event_id,
        session_id=result.session_id,
        reason=result.reason,
    )


@router.post("", response_model=ContactEventResponse, status_code=201)
async def create_contact_event(
    body: ContactEventCreate,
    db: AsyncSession = Depends(get_db),
):
    """Legacy click tracking: every call is a new billable event."""
    ledger = ContactLedger(db)
    event = await ledger.record_legacy(
        vendor_id=body.vendor_id,
        equipment_id=body.equipment_id,
        event_type=body.event_type,
        search_params_json=body.search_params_json,
    )
    await db.commit()
    return event
