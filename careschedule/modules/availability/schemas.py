# careschedule/modules/availability/schemas.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from careschedule.modules.availability.models import (
    RecurrenceType,
    Weekday,
    WindowStatus,
)
from careschedule.modules.slots.schemas import SlotPublic


class AvailabilityCreate(BaseModel):
    provider_id: str = Field(..., min_length=1, max_length=64)
    start_time: datetime = Field(..., description="Wall-clock time in `timezone`")
    end_time: datetime = Field(..., description="Wall-clock time in `timezone`")
    timezone: str = Field(..., min_length=1, description="IANA zone, e.g. America/New_York")

    recurrence_type: RecurrenceType = RecurrenceType.NONE
    recurrence_days: Optional[set[Weekday]] = None
    recurrence_end_date: Optional[datetime] = None

    slot_duration_minutes: int = Field(..., ge=15, le=480)

    price: Optional[Decimal] = Field(default=None, ge=0)
    currency: Optional[str] = Field(default=None, max_length=3)
    location: Optional[str] = None
    appointment_type: Optional[str] = None
    special_requirements: Optional[str] = None
    status: WindowStatus = WindowStatus.ACTIVE
    notes: Optional[str] = None

    @field_validator("recurrence_type", mode="before")
    @classmethod
    def _default_recurrence(cls, v):
        if v is None:
            return RecurrenceType.NONE
        return v.upper() if isinstance(v, str) else v

    @field_validator("recurrence_days", mode="before")
    @classmethod
    def _normalize_days(cls, v):
        if v is None:
            return v
        return [d.strip().upper() if isinstance(d, str) else d for d in v]


class AvailabilityPublic(BaseModel):
    id: UUID
    provider_id: str
    start_time: datetime
    end_time: datetime
    timezone: str
    recurrence_type: RecurrenceType
    recurrence_days: Optional[List[Weekday]] = None
    recurrence_end_date: Optional[datetime] = None
    slot_duration_minutes: int
    price: Optional[Decimal] = None
    currency: Optional[str] = None
    location: Optional[str] = None
    appointment_type: Optional[str] = None
    special_requirements: Optional[str] = None
    status: WindowStatus
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    total_slots: int = 0
    available_slots: int = 0
    booked_slots: int = 0
    cancelled_slots: int = 0
    appointment_slots: List[SlotPublic] = Field(default_factory=list)

    class Config:
        from_attributes = True
