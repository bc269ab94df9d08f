"""Seed script: Austin-area demo vendors, equipment and availability.

Usage:
    python scripts/seed_demo.py

Wipes marketplace tables in the configured DATABASE_URL, inserts demo
data, creates an admin user and prints a bearer token for it.
"""

import asyncio
import logging
import os
import random
import sys
import uuid
from datetime import timedelta
from decimal import Decimal

# Ensure src is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

logging.basicConfig(level=logging.INFO, format="%(levelname)s  %(message)s")
logger = logging.getLogger(__name__)

ADMIN_ID = "aaaaaaaa-0000-0000-0000-000000000001"
ADMIN_EMAIL = "admin@rigfinder.local"

VENDORS = [
    {
        "name": "United Rentals - North Austin",
        "phone": "(844) 873-4948",
        "email": "customerservice@ur.com",
        "website": "https://www.unitedrentals.com",
        "yard_address": "10300 N Interstate 35 Frontage, Austin, TX 78753",
        "yard_lat": 30.3781,
        "yard_lng": -97.6814,
        "plan_status": "pro",
        "is_sponsored": True,
        "cpc_rate": Decimal("20.00"),
    },
    {
        "name": "United Rentals - South Austin",
        "phone": "(844) 873-4948",
        "email": "customerservice@ur.com",
        "website": "https://www.unitedrentals.com",
        "yard_address": "6301 S Congress Ave, Austin, TX 78745",
        "yard_lat": 30.2052,
        "yard_lng": -97.7394,
        "plan_status": "pro",
        "is_sponsored": True,
        "cpc_rate": Decimal("20.00"),
    },
    {
        "name": "Jon's Rental",
        "phone": "(512) 331-1212",
        "email": "info@jonsrental.com",
        "website": "https://www.jonsrental.com",
        "yard_address": "13010 Research Blvd, Austin, TX 78750",
        "yard_lat": 30.4561,
        "yard_lng": -97.7922,
    },
    {
        "name": "HOLT CAT Austin",
        "phone": "(512) 282-2011",
        "email": "rental@holtcat.com",
        "website": "https://www.holtcat.com",
        "yard_address": "2001 W Howard Ln, Austin, TX 78728",
        "yard_lat": 30.4493,
        "yard_lng": -97.6892,
    },
    {
        "name": "BigRentz Austin",
        "phone": "(888) 325-5172",
        "email": "support@bigrentz.com",
        "website": "https://www.bigrentz.com",
        "yard_address": "Austin, TX",
        "yard_lat": 30.2672,
        "yard_lng": -97.7431,
    },
]

# (vendor index, type, make, model, size, day min, day max, hour min, hour max)
EQUIPMENT = [
    (0, "CTL", "Caterpillar", "259D3", "medium", 350, 425, 85, 110),
    (0, "EXCAVATOR", "Caterpillar", "308 CR", "medium", 450, 550, 115, 145),
    (0, "DOZER", "Caterpillar", "D3K2", "small", 550, 650, 140, 175),
    (1, "CTL", "Caterpillar", "289D3", "large", 400, 485, 100, 125),
    (1, "BACKHOE", "Caterpillar", "420F2", "medium", 325, 425, 85, 115),
    (1, "TELEHANDLER", "JLG", "1055", "large", 400, 500, 100, 135),
    (2, "SKID", "Bobcat", "S650", "medium", 250, 300, 65, 85),
    (2, "EXCAVATOR", "Bobcat", "E35", "small", 300, 375, 78, 98),
    (3, "GRADER", "Caterpillar", "120", "medium", 850, 1050, 215, 275),
    (3, "LOADER", "Caterpillar", "930M", "medium", 650, 800, 165, 210),
    (4, "SKID", "Various", "Medium Frame (1500-1999 lb)", "medium", 227, 300, None, None),
    (4, "CRANE", "Various", "Rough Terrain Crane", "large", 1500, 2200, None, None),
    (4, "FORKLIFT", "Various", "Warehouse Forklift (5000 lb)", "medium", None, None, None, None),
]


def _pick_status(rng: random.Random) -> str:
    roll = rng.random()
    if roll < 0.4:
        return "AVAILABLE"
    if roll < 0.7:
        return "LIMITED"
    if roll < 0.9:
        return "UNKNOWN"
    return "UNAVAILABLE"


async def seed():
    from sqlalchemy import delete
    from rigfinder.domain.models import (
        AuditLog,
        Availability,
        ContactEvent,
        Equipment,
        LeadRequest,
        Report,
        User,
        Vendor,
        VendorBilling,
    )
    from rigfinder.infra.clock import utcnow
    from rigfinder.infra.database import async_session, init_db
    from rigfinder.services.auth_service import create_access_token

    await init_db()

    rng = random.Random(42)
    now = utcnow()

    async with async_session() as session:
        async with session.begin():
            for model in (
                ContactEvent,
                LeadRequest,
                Report,
                AuditLog,
                Availability,
                Equipment,
                VendorBilling,
                Vendor,
            ):
                await session.execute(delete(model))
            await session.execute(delete(User).where(User.id == ADMIN_ID))

            session.add(User(id=ADMIN_ID, email=ADMIN_EMAIL, name="Demo Admin", role="admin"))

            vendor_ids = []
            for data in VENDORS:
                data = dict(data)
                cpc_rate = data.pop("cpc_rate", None)
                vendor = Vendor(id=str(uuid.uuid4()), **data)
                session.add(vendor)
                if cpc_rate is not None:
                    session.add(VendorBilling(vendor_id=vendor.id, cpc_rate=cpc_rate))
                vendor_ids.append(vendor.id)
                logger.info("Vendor %s (%s)", vendor.name, vendor.yard_address)

            for index, eq_type, make, model, size, day_min, day_max, hour_min, hour_max in EQUIPMENT:
                equipment = Equipment(
                    id=str(uuid.uuid4()),
                    vendor_id=vendor_ids[index],
                    type=eq_type,
                    size_class=size,
                    make=make,
                    model=model,
                    rate_day_min=day_min,
                    rate_day_max=day_max,
                    rate_hour_min=hour_min,
                    rate_hour_max=hour_max,
                )
                session.add(equipment)

                status = _pick_status(rng)
                days_back = {"AVAILABLE": 3, "LIMITED": 10}.get(status, 25)
                session.add(
                    Availability(
                        equipment_id=equipment.id,
                        status=status,
                        earliest_date=(
                            now + timedelta(days=rng.randint(1, 5)) if status == "LIMITED" else None
                        ),
                        last_updated=now - timedelta(days=rng.randint(0, days_back)),
                    )
                )
                logger.info("  %s %s (%s) %s", make, model, eq_type, status)

    logger.info("Seeded %d vendors and %d equipment listings", len(VENDORS), len(EQUIPMENT))
    print(f"Admin token ({ADMIN_EMAIL}): {create_access_token(ADMIN_ID, 'admin')}")


if __name__ == "__main__":
    asyncio.run(seed())
