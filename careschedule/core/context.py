# careschedule/core/context.py
from __future__ import annotations

from dataclasses import dataclass, field

from careschedule.core.config import Settings
from careschedule.core.locks import ProviderLocks


@dataclass
class SchedulingContext:
    """
    Everything the scheduling services need besides a session.
    Built once per application from Settings.
    """

    locks: ProviderLocks = field(default_factory=ProviderLocks)
    default_timezone: str = "UTC"
    horizon_months: int = 6
    max_occurrences: int = 5000
    search_default_days: int = 30

    @classmethod
    def from_settings(cls, settings: Settings) -> "SchedulingContext":
        return cls(
            locks=ProviderLocks(),
            default_timezone=settings.DEFAULT_TIMEZONE,
            horizon_months=settings.RECURRENCE_HORIZON_MONTHS,
            max_occurrences=settings.MAX_OCCURRENCES,
            search_default_days=settings.SEARCH_DEFAULT_DAYS,
        )
