"""Public listing detail -- the page a contractor lands on from search."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from rigfinder.domain.errors import EquipmentNotFoundError
from rigfinder.domain.models import Equipment
from rigfinder.domain.schemas import (
    EquipmentDetailResponse,
    EquipmentResponse,
    VendorContactResponse,
)
from rigfinder.infra.clock import utcnow
from rigfinder.infra.database import get_db
from rigfinder.services.availability import freshness_label

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/equipment", tags=["equipment"])


@router.get("/{equipment_id}", response_model=EquipmentDetailResponse)
async def get_equipment(
    equipment_id: str,
    db: AsyncSession = Depends(get_db),
):
    """One listing with its vendor's contact details and availability.

    Listings of deactivated vendors are hidden here as they are in search.
    """
    result = await db.execute(
        select(Equipment)
        .where(Equipment.id == equipment_id)
        .options(selectinload(Equipment.vendor), selectinload(Equipment.availability))
    )
    equipment = result.scalar_one_or_none()
    if equipment is None or not equipment.vendor.is_active:
        raise EquipmentNotFoundError(equipment_id)

    availability = equipment.availability
    last_updated = availability.last_updated if availability is not None else equipment.updated_at

    return EquipmentDetailResponse(
        **EquipmentResponse.model_validate(equipment).model_dump(),
        vendor=VendorContactResponse.model_validate(equipment.vendor),
        freshness=freshness_label(last_updated, utcnow()),
    )
