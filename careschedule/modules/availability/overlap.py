# careschedule/modules/availability/overlap.py
"""
Overlap detection between availability windows of one provider.

The rule is coarse: a recurring ACTIVE window conflicts with any
candidate starting on or before its recurrence end date, whatever the actual
recurrence days are. See find_overlapping for the exact predicate.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from careschedule.modules.availability import repository as windows_repo


async def has_overlap(
    session: AsyncSession,
    provider_id: str,
    candidate_start: datetime,
    candidate_end: datetime,
    exclude_window_id: Optional[UUID] = None,
) -> bool:
    """
    True if [candidate_start, candidate_end) (canonical UTC) conflicts with an
    ACTIVE window of ``provider_id``. ``exclude_window_id`` skips one window,
    for edits of an existing window.
    """
    conflicts = await windows_repo.find_overlapping(
        session,
        provider_id=provider_id,
        start_time=candidate_start,
        end_time=candidate_end,
        exclude_window_id=exclude_window_id,
    )
    return len(conflicts) > 0
