"""Dedupe key engine for contact events.

Repeated client-side fires of the same contact action collapse onto one
fingerprint for as long as they fall in the same 30-minute bucket. Buckets
are aligned to the epoch, not sliding: two clicks a minute apart that
straddle a bucket boundary get different keys and are both billable.
"""

from datetime import datetime

from rigfinder.domain.enums import ContactEventType
from rigfinder.infra.clock import epoch_ms
from rigfinder.services.identity_hasher import hash_identifier

DEDUPE_WINDOW_SECONDS = 30 * 60

# Unit separator: cannot appear in any id accepted by the API
FIELD_SEPARATOR = "\x1f"


def time_bucket(now: datetime, window_seconds: int = DEDUPE_WINDOW_SECONDS) -> int:
    """Index of the ``window_seconds`` bucket containing *now*."""
    return epoch_ms(now) // (window_seconds * 1000)


def fingerprint(
    vendor_id: str,
    equipment_id: str | None,
    event_type: ContactEventType,
    session_id: str,
    bucket: int,
) -> str:
    """Stable dedupe key for one logical contact action within a bucket."""
    parts = [vendor_id, equipment_id or "", ContactEventType(event_type).value, session_id, str(bucket)]
    for part in parts:
        if FIELD_SEPARATOR in part:
            raise ValueError("Identifier contains a reserved separator character")
    return hash_identifier(FIELD_SEPARATOR.join(parts))


def synthesize_session_id(ip_hash: str, user_agent_hash: str, now: datetime) -> str:
    """Session id for clients that didn't send one.

    Returned to the caller so later clicks from the same client reuse it;
    without that the same person would never dedupe.
    """
    return hash_identifier(f"{ip_hash}:{user_agent_hash}:{epoch_ms(now)}")
