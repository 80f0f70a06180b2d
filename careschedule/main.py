# careschedule/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from careschedule.core.config import settings
from careschedule.core.context import SchedulingContext
from careschedule.db.sql import AsyncSessionLocal, engine, init_db
from careschedule.routers import availability, health, slots

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


# Define lifespan event
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    The lifespan function is used to manage the FastAPI application lifecycle.
    """
    # Initialize database (create tables if they don't exist)
    await init_db(engine)
    app.state.session_factory = AsyncSessionLocal
    app.state.scheduling = SchedulingContext.from_settings(settings)
    yield
    await engine.dispose()


app = FastAPI(
    title="Provider Availability & Slot Scheduling",
    lifespan=lifespan,
)

# Routing
app.include_router(health.router, prefix=settings.API_PREFIX, tags=["health"])
app.include_router(availability.router, prefix=settings.API_PREFIX)
app.include_router(slots.router, prefix=settings.API_PREFIX)


@app.get("/")
def root():
    return {"message": "Scheduling API running successfully"}
