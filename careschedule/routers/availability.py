# careschedule/routers/availability.py
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from careschedule.core.context import SchedulingContext
from careschedule.core.errors import (
    BookedSlotsExist,
    InvalidTimeRange,
    InvalidTimezone,
    OverlappingAvailability,
    RecurrenceTooLarge,
    StorageFailure,
    WindowNotFound,
)
from careschedule.db.sql import get_session
from careschedule.dependencies import get_scheduling_context
from careschedule.modules.availability.schemas import (
    AvailabilityCreate,
    AvailabilityPublic,
)
from careschedule.modules.availability.service import (
    create_availability_svc,
    delete_availability_svc,
    get_availability_svc,
)

router = APIRouter(tags=["provider-availability"])


@router.post(
    "/provider/availability",
    response_model=AvailabilityPublic,
    status_code=status.HTTP_201_CREATED,
    summary="Create availability and generate its appointment slots",
)
async def availability_create(
    payload: AvailabilityCreate,
    session: AsyncSession = Depends(get_session),
    ctx: SchedulingContext = Depends(get_scheduling_context),
):
    try:
        return await create_availability_svc(session, payload, ctx)
    except (InvalidTimeRange, InvalidTimezone, RecurrenceTooLarge) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.code)
    except OverlappingAvailability as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.code)
    except StorageFailure as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.code)


@router.get(
    "/provider/{provider_id}/availability",
    response_model=AvailabilityPublic,
    summary="First active availability of a provider, with slot counts",
)
async def availability_for_provider(
    provider_id: str,
    session: AsyncSession = Depends(get_session),
):
    try:
        return await get_availability_svc(session, provider_id)
    except WindowNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.code)


@router.delete(
    "/provider/availability/{window_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete availability (soft, or cascade for recurring windows)",
)
async def availability_delete(
    window_id: UUID,
    delete_recurring: bool = Query(False, description="Hard-delete a recurring window and its slots"),
    session: AsyncSession = Depends(get_session),
    ctx: SchedulingContext = Depends(get_scheduling_context),
):
    try:
        await delete_availability_svc(session, window_id, delete_recurring, ctx)
    except WindowNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.code)
    except BookedSlotsExist as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.code)
    except StorageFailure as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.code)
    return None
