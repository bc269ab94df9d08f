"""Public equipment search -- no contractor account required.

GET /api/search ranks listings by sponsorship, availability and recency,
optionally limited to a radius around the jobsite.
"""

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from rigfinder.app.config import get_settings
from rigfinder.domain.enums import EquipmentType, NeedDate
from rigfinder.domain.schemas import ListingResponse
from rigfinder.infra.database import get_db
from rigfinder.services.search_ranking import SearchFilters, SearchService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/search", tags=["search"])


@router.get("", response_model=list[ListingResponse])
async def search_equipment(
    equipment_type: EquipmentType | None = Query(None, alias="equipmentType"),
    lat: float | None = Query(None, ge=-90, le=90),
    lng: float | None = Query(None, ge=-180, le=180),
    radius: float | None = Query(None, gt=0),
    need_date: NeedDate = Query(NeedDate.ANY, alias="needDate"),
    max_day_rate: float | None = Query(None, alias="maxDayRate", ge=0),
    available_only: bool = Query(False, alias="availableOnly"),
    db: AsyncSession = Depends(get_db),
):
    """Search equipment listings.

    needDate is accepted for analytics and forward compatibility; it does
    not filter results.
    """
    filters = SearchFilters(
        equipment_type=equipment_type,
        lat=lat,
        lng=lng,
        radius_miles=radius if radius is not None else get_settings().default_search_radius_miles,
        need_date=need_date,
        max_day_rate=max_day_rate,
        available_only=available_only,
    )
    listings = await SearchService(db).search(filters)
    return [ListingResponse.model_validate(asdict(listing)) for listing in listings]
