# careschedule/dependencies.py
from __future__ import annotations

from fastapi import Request

from careschedule.core.config import settings
from careschedule.core.context import SchedulingContext


def get_scheduling_context(request: Request) -> SchedulingContext:
    """
    The SchedulingContext built in the app lifespan. Falls back to a fresh
    one (own locks) when the app was started without the lifespan.
    """
    ctx = getattr(request.app.state, "scheduling", None)
    if ctx is None:
        ctx = SchedulingContext.from_settings(settings)
        request.app.state.scheduling = ctx
    return ctx
