"""Access-token handling.

Sign-up, login and password storage belong to the external auth service;
rigfinder only verifies the HS256 bearer tokens it issues. Token creation
is kept for tooling and tests.
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rigfinder.app.config import get_settings
from rigfinder.domain.models import User, Vendor

settings = get_settings()


def create_access_token(user_id: str, role: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expiration_minutes)
    payload = {"sub": user_id, "role": role, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict | None:
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


async def get_user_by_id(db: AsyncSession, user_id: str) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_vendor_for_user(db: AsyncSession, user_id: str) -> Vendor | None:
    result = await db.execute(select(Vendor).where(Vendor.user_id == user_id))
    return result.scalar_one_or_none()
