# careschedule/db/base.py
from __future__ import annotations

import datetime as dt
import uuid
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass


class UUIDPKMixin:
    """Standard UUID (v4) primary key."""

    id: Mapped[uuid.UUID] = mapped_column(default=uuid.uuid4, primary_key=True)


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)


class TimestampMixin:
    """Timestamps in naive UTC; filled client-side so they are loaded after flush."""

    created_at: Mapped[dt.datetime] = mapped_column(
        nullable=False, default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        nullable=False, default=_utcnow, server_default=func.now(), onupdate=_utcnow
    )


class ReprMixin:
    """Readable __repr__ for debug/logging."""

    def __repr__(self) -> str:
        cols: list[str] = []
        for k in getattr(self, "__mapper__").c.keys():
            v: Any = getattr(self, k, None)
            if k in {"booking_notes", "special_requirements"} and v:
                v = "..."
            cols.append(f"{k}={v!r}")
        return f"<{self.__class__.__name__} {' '.join(cols)}>"


__all__ = ["Base", "UUIDPKMixin", "TimestampMixin", "ReprMixin"]
