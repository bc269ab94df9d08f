"""Best-effort audit trail for vendor and admin actions.

Audit rows are not billing-relevant, so a failed write is logged and
swallowed instead of failing the request that triggered it.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rigfinder.domain.enums import AuditAction
from rigfinder.domain.models import AuditLog

logger = logging.getLogger(__name__)


async def record_audit(
    db: AsyncSession,
    action: AuditAction,
    details: str,
    *,
    vendor_id: str | None = None,
    user_id: str | None = None,
) -> bool:
    """Append an audit row inside a savepoint. Returns False if it failed.

    The caller's pending changes are flushed first, outside the savepoint,
    so a failure there propagates instead of being logged as an audit error.
    """
    await db.flush()
    try:
        async with db.begin_nested():
            db.add(
                AuditLog(
                    vendor_id=vendor_id,
                    user_id=user_id,
                    action=AuditAction(action).value,
                    details=details,
                )
            )
    except SQLAlchemyError as e:
        logger.warning("Audit log write failed (%s): %s", action, e)
        return False
    return True
