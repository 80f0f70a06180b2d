from __future__ import annotations

from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession

from careschedule.modules.audit.models import AuditLog


async def write_audit_log(
    session: AsyncSession,
    actor_id: str | None,
    action: str,
    details: str | None = None,
):
    """
    Write an audit log entry.

    action:
        "CREATE_AVAILABILITY"
        "DELETE_AVAILABILITY"
        "UPDATE_SLOT"
        "<METHOD> <path> COMMIT" / "<METHOD> <path> ROLLBACK"

    details:
        free text, e.g. "window=<uuid> slots=16"
    """
    stmt = insert(AuditLog).values(
        actor_id=actor_id,
        action=action,
        details=details,
    )
    await session.execute(stmt)
