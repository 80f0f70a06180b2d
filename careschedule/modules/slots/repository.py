# careschedule/modules/slots/repository.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Sequence
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from careschedule.modules.slots.models import AppointmentSlot, SlotStatus


async def bulk_insert(db: AsyncSession, slots: Iterable[AppointmentSlot]) -> int:
    slots = list(slots)
    db.add_all(slots)
    await db.flush()
    return len(slots)


async def get_slot(
    db: AsyncSession, *, slot_id: UUID, refresh: bool = False
) -> Optional[AppointmentSlot]:
    return await db.get(AppointmentSlot, slot_id, populate_existing=refresh)


async def list_by_window(db: AsyncSession, *, window_id: UUID) -> Sequence[AppointmentSlot]:
    rows = await db.execute(
        select(AppointmentSlot)
        .where(AppointmentSlot.window_id == window_id)
        .order_by(AppointmentSlot.start_time, AppointmentSlot.id)
    )
    return rows.scalars().all()


async def list_by_provider(
    db: AsyncSession, *, provider_id: str, status: Optional[SlotStatus] = None
) -> Sequence[AppointmentSlot]:
    conditions = [AppointmentSlot.provider_id == provider_id]
    if status is not None:
        conditions.append(AppointmentSlot.status == status.value)
    rows = await db.execute(
        select(AppointmentSlot)
        .where(*conditions)
        .order_by(AppointmentSlot.start_time, AppointmentSlot.id)
    )
    return rows.scalars().all()


async def count_booked_by_window(db: AsyncSession, *, window_id: UUID) -> int:
    stmt = (
        select(func.count())
        .select_from(AppointmentSlot)
        .where(
            AppointmentSlot.window_id == window_id,
            AppointmentSlot.status == SlotStatus.BOOKED.value,
        )
    )
    return (await db.execute(stmt)).scalar_one()


async def delete_unbooked_by_window(db: AsyncSession, *, window_id: UUID) -> int:
    """Delete the window's slots, never touching BOOKED ones."""
    res = await db.execute(
        delete(AppointmentSlot).where(
            AppointmentSlot.window_id == window_id,
            AppointmentSlot.status != SlotStatus.BOOKED.value,
        )
    )
    return res.rowcount or 0  # type: ignore


async def search_available(
    db: AsyncSession,
    *,
    start_time: datetime,
    end_time: datetime,
    location: Optional[str] = None,
    appointment_type: Optional[str] = None,
    provider_id: Optional[str] = None,
    max_price: Optional[Decimal] = None,
    slot_duration_minutes: Optional[int] = None,
) -> Sequence[AppointmentSlot]:
    """
    AVAILABLE slots starting within [start_time, end_time], narrowed by
    the optional filters. Ordered by start_time, then id.
    """
    conditions = [
        AppointmentSlot.status == SlotStatus.AVAILABLE.value,
        AppointmentSlot.start_time >= start_time,
        AppointmentSlot.start_time <= end_time,
    ]
    if location:
        # % and _ in the term are matched literally
        conditions.append(AppointmentSlot.location.icontains(location.strip(), autoescape=True))
    if appointment_type:
        conditions.append(AppointmentSlot.appointment_type == appointment_type)
    if provider_id:
        conditions.append(AppointmentSlot.provider_id == provider_id)
    if max_price is not None:
        conditions.append(AppointmentSlot.price <= max_price)

    rows = await db.execute(
        select(AppointmentSlot)
        .where(*conditions)
        .order_by(AppointmentSlot.start_time, AppointmentSlot.id)
    )
    slots = rows.scalars().all()

    # slot length compared in Python: interval arithmetic differs per dialect
    if slot_duration_minutes is not None:
        slots = [s for s in slots if s.duration_minutes == slot_duration_minutes]
    return slots
