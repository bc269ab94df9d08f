"""Search Ranking Engine: geo-radius filtering and listing order.

Filters, in order:
    1. vendor is_active
    2. exact equipment type
    3. rate_day_min <= max_day_rate (unpublished price always passes)
    4. haversine distance <= radius, only when a geo point is given
       (listings without yard coordinates then drop out)
    5. available-only keeps AVAILABLE and LIMITED

Order: sponsored first, then availability priority, then most recently
updated. Python's sort is stable and candidates are loaded in a fixed
order, so identical queries return identical results.

Steps 1-3 are pushed into SQL by SearchService and re-checked by the pure
``rank_listings`` so the ranking can be exercised without a database.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from rigfinder.domain.enums import AvailabilityStatus, EquipmentType, NeedDate
from rigfinder.domain.models import Equipment, Vendor
from rigfinder.infra.clock import Clock, epoch_ms, utcnow
from rigfinder.services.availability import (
    availability_priority,
    freshness_label,
    is_rentable,
)

logger = logging.getLogger(__name__)

EARTH_RADIUS_MILES = 3959.0
DEFAULT_RADIUS_MILES = 40.0


def haversine_miles(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Return the great-circle distance in miles between two lat/lng points."""
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(dlng / 2) ** 2
    )
    return EARTH_RADIUS_MILES * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


@dataclass
class SearchFilters:
    equipment_type: EquipmentType | None = None
    lat: float | None = None
    lng: float | None = None
    radius_miles: float = DEFAULT_RADIUS_MILES
    need_date: NeedDate = NeedDate.ANY
    max_day_rate: float | None = None
    available_only: bool = False

    @property
    def has_geo_point(self) -> bool:
        return self.lat is not None and self.lng is not None


@dataclass
class Listing:
    """One search result row: equipment joined with vendor and availability."""

    id: str
    vendor_id: str
    vendor_name: str
    vendor_phone: str
    vendor_email: str
    vendor_website: str | None
    vendor_is_active: bool
    is_sponsored: bool
    yard_lat: float | None
    yard_lng: float | None
    type: str
    size_class: str | None
    make: str | None
    model: str | None
    year: int | None
    rate_day_min: float | None
    rate_day_max: float | None
    rate_hour_min: float | None
    rate_hour_max: float | None
    notes: str | None
    image_url: str | None
    availability_status: AvailabilityStatus
    earliest_date: datetime | None
    last_updated: datetime | None
    distance: float | None = None
    freshness: str | None = None


def listing_from_equipment(equipment: Equipment) -> Listing:
    """Flatten an Equipment row (vendor + availability loaded) into a Listing."""
    vendor = equipment.vendor
    availability = equipment.availability
    status = AvailabilityStatus(availability.status) if availability else AvailabilityStatus.UNKNOWN
    last_updated = (availability.last_updated if availability else None) or equipment.updated_at
    return Listing(
        id=equipment.id,
        vendor_id=vendor.id,
        vendor_name=vendor.name,
        vendor_phone=vendor.phone,
        vendor_email=vendor.email,
        vendor_website=vendor.website,
        vendor_is_active=bool(vendor.is_active),
        is_sponsored=bool(vendor.is_sponsored),
        yard_lat=vendor.yard_lat,
        yard_lng=vendor.yard_lng,
        type=equipment.type,
        size_class=equipment.size_class,
        make=equipment.make,
        model=equipment.model,
        year=equipment.year,
        rate_day_min=equipment.rate_day_min,
        rate_day_max=equipment.rate_day_max,
        rate_hour_min=equipment.rate_hour_min,
        rate_hour_max=equipment.rate_hour_max,
        notes=equipment.notes,
        image_url=equipment.image_url,
        availability_status=status,
        earliest_date=availability.earliest_date if availability else None,
        last_updated=last_updated,
    )


def _passes_static_filters(listing: Listing, filters: SearchFilters) -> bool:
    if not listing.vendor_is_active:
        return False
    if filters.equipment_type is not None and listing.type != EquipmentType(filters.equipment_type).value:
        return False
    if (
        filters.max_day_rate is not None
        and listing.rate_day_min is not None
        and listing.rate_day_min > filters.max_day_rate
    ):
        return False
    return True


def _sort_key(listing: Listing) -> tuple:
    updated = epoch_ms(listing.last_updated) if listing.last_updated else 0
    return (
        not listing.is_sponsored,
        availability_priority(listing.availability_status),
        -updated,
    )


def rank_listings(
    listings: list[Listing],
    filters: SearchFilters,
    now: datetime | None = None,
) -> list[Listing]:
    """Filter and order candidate listings. Pure apart from filling distance/freshness."""
    now = now or utcnow()
    results: list[Listing] = []

    for listing in listings:
        if not _passes_static_filters(listing, filters):
            continue

        listing.distance = None
        if filters.has_geo_point and listing.yard_lat is not None and listing.yard_lng is not None:
            listing.distance = haversine_miles(
                filters.lat, filters.lng, listing.yard_lat, listing.yard_lng
            )

        if filters.has_geo_point and (
            listing.distance is None or listing.distance > filters.radius_miles
        ):
            continue

        if filters.available_only and not is_rentable(listing.availability_status):
            continue

        listing.freshness = freshness_label(listing.last_updated, now)
        results.append(listing)

    return sorted(results, key=_sort_key)


class SearchService:
    """Loads candidate equipment and ranks it for a search request."""

    def __init__(self, db: AsyncSession, *, clock: Clock = utcnow):
        self.db = db
        self._clock = clock

    async def search(self, filters: SearchFilters) -> list[Listing]:
        stmt = (
            select(Equipment)
            .join(Equipment.vendor)
            .where(Vendor.is_active.is_(True))
            .options(selectinload(Equipment.vendor), selectinload(Equipment.availability))
            .order_by(Equipment.created_at, Equipment.id)
        )
        if filters.equipment_type is not None:
            stmt = stmt.where(Equipment.type == EquipmentType(filters.equipment_type).value)
        if filters.max_day_rate is not None:
            stmt = stmt.where(
                or_(
                    Equipment.rate_day_min.is_(None),
                    Equipment.rate_day_min <= filters.max_day_rate,
                )
            )

        result = await self.db.execute(stmt)
        candidates = [listing_from_equipment(eq) for eq in result.scalars().all()]
        ranked = rank_listings(candidates, filters, now=self._clock())

        logger.info(
            "Search type=%s geo=%s radius=%s: %d candidates, %d results",
            EquipmentType(filters.equipment_type).value if filters.equipment_type else "any",
            filters.has_geo_point,
            filters.radius_miles,
            len(candidates),
            len(ranked),
        )
        return ranked
