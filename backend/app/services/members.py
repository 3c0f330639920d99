from __future__ import annotations
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import upsert
from app.models.activity import Member


async def register_member(
    session: AsyncSession,
    group_id: str,
    user_id: str,
    display_name: str,
    username: str | None = None,
) -> tuple[Member, bool]:
    """
    Idempotent registration with zeroed counters. Returns (member, created).
    An existing member keeps its counters; name and handle are refreshed.
    """
    ins = upsert(session, Member).values(
        group_id=group_id, user_id=user_id, display_name=display_name, username=username,
        gym_count=0, shipping_count=0, mindfulness_count=0,
    )
    res = await session.execute(
        ins.on_conflict_do_nothing(index_elements=[Member.group_id, Member.user_id])
    )
    created = (res.rowcount or 0) > 0

    member = await session.get(Member, (group_id, user_id), populate_existing=True)
    if not created:
        member.display_name = display_name
        if username:
            member.username = username
    await session.commit()
    await session.refresh(member)
    return member, created
