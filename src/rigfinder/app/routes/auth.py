"""Authentication dependencies and the current-user route.

Tokens are issued by the external auth service; these dependencies only
verify them and resolve the caller.
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from rigfinder.domain.enums import UserRole
from rigfinder.domain.errors import ForbiddenError, UnauthorizedError, VendorNotFoundError
from rigfinder.domain.models import User, Vendor
from rigfinder.infra.database import get_db
from rigfinder.services.auth_service import decode_token, get_user_by_id, get_vendor_for_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


async def get_current_user_dep(
    request: Request, db: AsyncSession = Depends(get_db)
) -> User:
    """Dependency: extract current user from Bearer token."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        raise UnauthorizedError("Authentication required")
    token = auth_header.removeprefix("Bearer ")
    payload = decode_token(token)
    if not payload or "sub" not in payload:
        raise UnauthorizedError("Invalid or expired token")
    user = await get_user_by_id(db, payload["sub"])
    if not user or not user.is_active:
        raise UnauthorizedError("User not found or inactive")
    return user


def require_role(*roles: UserRole):
    """Factory: dependency that checks user has one of the required roles."""
    allowed = {UserRole(r).value for r in roles}

    async def checker(user: User = Depends(get_current_user_dep)):
        if user.role not in allowed:
            logger.info("User %s denied: role %s not in %s", user.id, user.role, sorted(allowed))
            raise ForbiddenError("Admin access required" if allowed == {"admin"} else "Insufficient permissions")
        return user

    return checker


async def get_current_vendor(
    user: User = Depends(get_current_user_dep),
    db: AsyncSession = Depends(get_db),
) -> Vendor:
    """Dependency: the vendor profile owned by the current user."""
    vendor = await get_vendor_for_user(db, user.id)
    if vendor is None:
        raise VendorNotFoundError()
    return vendor


@router.get("/me")
async def me(user: User = Depends(get_current_user_dep)):
    """Return the authenticated user's identity."""
    return {"id": user.id, "email": user.email, "name": user.name, "role": user.role}
