# careschedule/core/errors.py
from __future__ import annotations


class SchedulingError(Exception):
    """Base class for every error raised by the scheduling engine."""

    code = "scheduling_error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.code)


class InvalidTimeRange(SchedulingError):
    """start >= end, or the slot duration does not fit the window."""

    code = "invalid_time_range"


class OverlappingAvailability(SchedulingError):
    code = "overlapping_availability"


class InvalidTimezone(SchedulingError):
    code = "invalid_timezone"


class RecurrenceTooLarge(SchedulingError):
    """Recurrence would produce more occurrences than allowed."""

    code = "recurrence_too_large"


class WindowNotFound(SchedulingError):
    code = "window_not_found"


class SlotNotFound(SchedulingError):
    code = "slot_not_found"


class BookedSlotsExist(SchedulingError):
    """Window still owns at least one BOOKED slot."""

    code = "booked_slots_exist"


class SlotImmutable(SchedulingError):
    """Booked slots cannot be modified."""

    code = "slot_immutable"


class StorageFailure(SchedulingError):
    """
    Persistence-layer fault (driver error, constraint violation, ...).
    The unit of work has already been rolled back when this is raised.
    """

    code = "storage_failure"


__all__ = [
    "SchedulingError",
    "InvalidTimeRange",
    "OverlappingAvailability",
    "InvalidTimezone",
    "RecurrenceTooLarge",
    "WindowNotFound",
    "SlotNotFound",
    "BookedSlotsExist",
    "SlotImmutable",
    "StorageFailure",
]
