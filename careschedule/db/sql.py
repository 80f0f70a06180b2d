# careschedule/db/sql.py
from __future__ import annotations

import logging
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from careschedule.core.config import settings
from careschedule.db.base import Base
from careschedule.modules.log import write_audit_log

logger = logging.getLogger(__name__)


def build_engine(dsn: str, *, echo: bool = False) -> AsyncEngine:
    """
    Create the async engine. Pool sizing only applies to server databases;
    SQLite (aiosqlite) uses its own pool class.
    """
    if dsn.startswith("sqlite"):
        return create_async_engine(dsn, echo=echo)
    return create_async_engine(
        dsn,
        echo=echo,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
        pool_timeout=settings.DB_POOL_TIMEOUT,
    )


def build_sessionmaker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=bind,
        expire_on_commit=False,
        autoflush=False,
        class_=AsyncSession,
    )


engine = build_engine(settings.SQL_DSN, echo=settings.DB_ECHO)

AsyncSessionLocal = build_sessionmaker(engine)


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    """
    Provide a DB session for each request.
    Automatically apply commit/rollback and write audit logs.
    """
    session_factory = getattr(request.app.state, "session_factory", AsyncSessionLocal)
    action = f"{request.method} {request.url.path}"

    async with session_factory() as session:
        try:
            yield session

            await session.commit()

            await write_audit_log(
                session,
                actor_id=None,
                action=f"{action} COMMIT",
                details="Operation completed successfully",
            )
            await session.commit()

        except Exception as exc:

            await session.rollback()
            logger.info("%s rolled back: %s", action, exc)

            await write_audit_log(
                session,
                actor_id=None,
                action=f"{action} ROLLBACK",
                details=str(exc),
            )
            await session.commit()

            raise


async def init_db(bind: AsyncEngine | None = None) -> None:
    """
    Initialize database tables
    """
    # Import all models here so they get registered on Base.metadata
    from careschedule.modules.audit import models as audit_models  # noqa: F401
    from careschedule.modules.availability import models as availability_models  # noqa: F401
    from careschedule.modules.slots import models as slot_models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
