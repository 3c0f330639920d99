from __future__ import annotations
import os
import time
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable
import structlog
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.db import upsert
from app.models.lock import SubmissionLock

log = structlog.get_logger()


class LockBusy(Exception):
    """Another submission for the same (group, member) is in flight."""

    def __init__(self, group_id: str, user_id: str):
        super().__init__(f"lock busy for {group_id}/{user_id}")
        self.group_id = group_id
        self.user_id = user_id


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def new_owner_token() -> str:
    return f"{os.getpid()}:{uuid.uuid4().hex}"


class LockManager:
    """
    Leased locks keyed by (group_id, user_id), stored in `submission_locks`.

    Acquisition is a single INSERT .. ON CONFLICT DO UPDATE .. WHERE expired,
    so the database decides the race: when several callers hit an absent or
    expired lock at once, exactly one statement returns a row.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        lease_seconds: float = 10.0,
        clock: Callable[[], int] = _now_ms,
    ):
        if lease_seconds <= 0:
            raise ValueError("lease_seconds must be > 0")
        self._sessions = session_factory
        self._lease_ms = int(lease_seconds * 1000)
        self._clock = clock

    async def acquire(self, group_id: str, user_id: str) -> str:
        token = new_owner_token()
        now = self._clock()
        async with self._sessions() as session:
            ins = upsert(session, SubmissionLock).values(
                group_id=group_id,
                user_id=user_id,
                owner_token=token,
                acquired_at_ms=now,
                expires_at_ms=now + self._lease_ms,
            )
            stmt = ins.on_conflict_do_update(
                index_elements=[SubmissionLock.group_id, SubmissionLock.user_id],
                set_={
                    "owner_token": ins.excluded.owner_token,
                    "acquired_at_ms": ins.excluded.acquired_at_ms,
                    "expires_at_ms": ins.excluded.expires_at_ms,
                },
                where=SubmissionLock.expires_at_ms <= now,
            ).returning(SubmissionLock.owner_token)
            won = await session.scalar(stmt)
            await session.commit()

        if won != token:
            log.info("lock_busy", group_id=group_id, user_id=user_id)
            raise LockBusy(group_id, user_id)
        log.debug("lock_acquired", group_id=group_id, user_id=user_id, owner=token)
        return token

    async def release(self, group_id: str, user_id: str, token: str) -> bool:
        """Delete the lock only if `token` still owns it. Stale tokens are a no-op."""
        async with self._sessions() as session:
            res = await session.execute(
                delete(SubmissionLock).where(
                    SubmissionLock.group_id == group_id,
                    SubmissionLock.user_id == user_id,
                    SubmissionLock.owner_token == token,
                )
            )
            await session.commit()
        released = (res.rowcount or 0) > 0
        if not released:
            log.warning("lock_release_stale", group_id=group_id, user_id=user_id, owner=token)
        return released

    async def is_locked(self, group_id: str, user_id: str) -> bool:
        async with self._sessions() as session:
            expires = await session.scalar(
                select(SubmissionLock.expires_at_ms).where(
                    SubmissionLock.group_id == group_id,
                    SubmissionLock.user_id == user_id,
                )
            )
        return expires is not None and self._clock() < int(expires)

    @asynccontextmanager
    async def hold(self, group_id: str, user_id: str) -> AsyncIterator[str]:
        """
        Scoped acquisition: raises LockBusy, otherwise yields the owner token and
        releases on every exit path. A failed release is logged; the lease expires on its own.
        """
        token = await self.acquire(group_id, user_id)
        try:
            yield token
        finally:
            try:
                await self.release(group_id, user_id, token)
            except Exception:
                log.exception("lock_release_failed", group_id=group_id, user_id=user_id, owner=token)
