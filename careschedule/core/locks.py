# careschedule/core/locks.py
from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession


class ProviderLocks:
    """
    One asyncio.Lock per provider id.

    Window creation and deletion, and slot updates, hold the provider's lock
    from validation up to commit, so a check and the write that depends on it
    cannot interleave with another write for the same provider inside this
    process.

    An entry only lives while someone holds or waits for it.

    Created once per application (see main.lifespan) and handed around
    through SchedulingContext.
    """

    def __init__(self) -> None:
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def locked(self, provider_id: str) -> bool:
        lock = self._locks.get(str(provider_id))
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(
        self, provider_id: str, session: AsyncSession | None = None
    ) -> AsyncIterator[None]:
        """
        Acquire the in-process lock, and on PostgreSQL a transaction-scoped
        advisory lock as well so separate worker processes serialize too.
        """
        key = str(provider_id)
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                if session is not None and session.get_bind().dialect.name == "postgresql":
                    await session.execute(
                        text("SELECT pg_advisory_xact_lock(hashtext(:key))"),
                        {"key": key},
                    )
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]
