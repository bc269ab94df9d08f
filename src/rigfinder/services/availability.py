"""Availability state model.

No transition graph is enforced: the owning vendor may move a listing
from any status to any other. Every status write refreshes last_updated,
and earliest_date survives only while the listing is LIMITED.
"""

import logging
from datetime import datetime, timedelta

from rigfinder.domain.enums import AvailabilityStatus
from rigfinder.domain.models import Availability
from rigfinder.infra.clock import as_naive_utc

logger = logging.getLogger(__name__)

# Lower sorts first in search results
AVAILABILITY_PRIORITY: dict[AvailabilityStatus, int] = {
    AvailabilityStatus.AVAILABLE: 0,
    AvailabilityStatus.LIMITED: 1,
    AvailabilityStatus.UNKNOWN: 2,
    AvailabilityStatus.UNAVAILABLE: 3,
}

RENTABLE_STATUSES = frozenset({AvailabilityStatus.AVAILABLE, AvailabilityStatus.LIMITED})

FRESH_DAYS = 7
MODERATE_DAYS = 30


def availability_priority(status: AvailabilityStatus | str | None) -> int:
    """Sort rank for a status; missing status reads as UNKNOWN."""
    if status is None:
        return AVAILABILITY_PRIORITY[AvailabilityStatus.UNKNOWN]
    return AVAILABILITY_PRIORITY[AvailabilityStatus(status)]


def is_rentable(status: AvailabilityStatus | str | None) -> bool:
    return status is not None and AvailabilityStatus(status) in RENTABLE_STATUSES


def freshness_label(last_updated: datetime | None, now: datetime) -> str:
    """Display badge for how recently availability was touched.

    fresh    - updated within the last 7 days
    moderate - 7 to 30 days
    stale    - older, or never updated
    """
    if last_updated is None:
        return "stale"
    age = as_naive_utc(now) - as_naive_utc(last_updated)
    if age < timedelta(days=FRESH_DAYS):
        return "fresh"
    if age <= timedelta(days=MODERATE_DAYS):
        return "moderate"
    return "stale"


def new_availability(equipment_id: str, now: datetime) -> Availability:
    """Initial availability row created alongside new equipment."""
    return Availability(
        equipment_id=equipment_id,
        status=AvailabilityStatus.UNKNOWN.value,
        earliest_date=None,
        last_updated=now,
    )


def apply_availability_update(
    availability: Availability,
    status: AvailabilityStatus,
    earliest_date: datetime | None,
    now: datetime,
) -> Availability:
    """Set a new status in place and refresh last_updated."""
    status = AvailabilityStatus(status)
    availability.status = status.value
    if status is AvailabilityStatus.LIMITED and earliest_date is not None:
        availability.earliest_date = as_naive_utc(earliest_date)
    else:
        availability.earliest_date = None
    availability.last_updated = as_naive_utc(now)

    logger.info(
        "Availability for equipment %s set to %s", availability.equipment_id, status.value
    )
    return availability
