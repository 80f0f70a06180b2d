# careschedule/modules/availability/models.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from careschedule.db.base import Base, ReprMixin, TimestampMixin, UUIDPKMixin


class RecurrenceType(str, PyEnum):
    NONE = "NONE"
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class WindowStatus(str, PyEnum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"
    DELETED = "DELETED"


class Weekday(str, PyEnum):
    """Weekday names in datetime.weekday() order."""

    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @property
    def number(self) -> int:
        return list(Weekday).index(self)


class AvailabilityWindow(UUIDPKMixin, TimestampMixin, ReprMixin, Base):
    """
    A provider's declared span of availability, possibly recurring.

    start_time / end_time / recurrence_end_date are canonical (naive UTC);
    ``timezone`` keeps the zone the provider authored it in.
    Slots point at their window through appointment_slots.window_id; the
    window holds no collection of its slots.
    """

    __tablename__ = "availability_windows"

    provider_id: Mapped[str] = mapped_column(String(64), nullable=False)

    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    timezone: Mapped[str] = mapped_column(String(64), nullable=False)

    recurrence_type: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=RecurrenceType.NONE.value,
        server_default=RecurrenceType.NONE.value,
    )
    # list of Weekday values, only meaningful for WEEKLY
    recurrence_days: Mapped[Optional[list[str]]] = mapped_column(JSON, nullable=True)
    recurrence_end_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True
    )

    slot_duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)

    price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    currency: Mapped[Optional[str]] = mapped_column(String(3), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    appointment_type: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    special_requirements: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=WindowStatus.ACTIVE.value,
        server_default=WindowStatus.ACTIVE.value,
    )

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_window_time_order"),
        CheckConstraint(
            "slot_duration_minutes BETWEEN 15 AND 480",
            name="ck_window_slot_duration",
        ),
        Index("ix_window_provider_status", "provider_id", "status"),
        Index("ix_window_provider_start", "provider_id", "start_time"),
    )

    @property
    def recurrence(self) -> RecurrenceType:
        return RecurrenceType(self.recurrence_type or RecurrenceType.NONE.value)

    @property
    def weekdays(self) -> set[int]:
        """recurrence_days as datetime.weekday() numbers."""
        return {Weekday(d).number for d in (self.recurrence_days or [])}
