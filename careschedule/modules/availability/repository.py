# careschedule/modules/availability/repository.py
from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import and_, delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from careschedule.modules.availability.models import (
    AvailabilityWindow,
    RecurrenceType,
    WindowStatus,
)


async def insert_window(db: AsyncSession, window: AvailabilityWindow) -> AvailabilityWindow:
    db.add(window)
    await db.flush()
    return window


async def get_window(db: AsyncSession, *, window_id: UUID) -> Optional[AvailabilityWindow]:
    return await db.get(AvailabilityWindow, window_id)


async def list_by_provider_and_status(
    db: AsyncSession, *, provider_id: str, status: WindowStatus = WindowStatus.ACTIVE
) -> Sequence[AvailabilityWindow]:
    rows = await db.execute(
        select(AvailabilityWindow)
        .where(
            AvailabilityWindow.provider_id == provider_id,
            AvailabilityWindow.status == status.value,
        )
        .order_by(AvailabilityWindow.start_time, AvailabilityWindow.created_at)
    )
    return rows.scalars().all()


async def find_overlapping(
    db: AsyncSession,
    *,
    provider_id: str,
    start_time: datetime,
    end_time: datetime,
    exclude_window_id: Optional[UUID] = None,
) -> Sequence[AvailabilityWindow]:
    """
    ACTIVE windows of the provider that conflict with [start_time, end_time):
    either the ranges intersect, or the window recurs and its recurrence end
    date is on/after start_time. A recurring window with no end date only
    conflicts through the range test (NULL >= x is never true).
    """
    conditions = [
        AvailabilityWindow.provider_id == provider_id,
        AvailabilityWindow.status == WindowStatus.ACTIVE.value,
        or_(
            and_(
                AvailabilityWindow.start_time < end_time,
                AvailabilityWindow.end_time > start_time,
            ),
            and_(
                AvailabilityWindow.recurrence_type != RecurrenceType.NONE.value,
                AvailabilityWindow.recurrence_end_date >= start_time,
            ),
        ),
    ]
    if exclude_window_id is not None:
        conditions.append(AvailabilityWindow.id != exclude_window_id)

    rows = await db.execute(
        select(AvailabilityWindow).where(*conditions).order_by(AvailabilityWindow.start_time)
    )
    return rows.scalars().all()


async def set_status(db: AsyncSession, *, window_id: UUID, status: WindowStatus) -> int:
    res = await db.execute(
        update(AvailabilityWindow)
        .where(AvailabilityWindow.id == window_id)
        .values(status=status.value)
    )
    return res.rowcount or 0  # type: ignore


async def delete_window(db: AsyncSession, *, window_id: UUID) -> int:
    res = await db.execute(
        delete(AvailabilityWindow).where(AvailabilityWindow.id == window_id)
    )
    return res.rowcount or 0  # type: ignore
