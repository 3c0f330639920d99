from __future__ import annotations
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.activity import Member, CATEGORY_COLUMNS
from app.schemas.leaderboard import LeaderboardRow
from app.schemas.submission import Category


async def leaderboard(session: AsyncSession, group_id: str, category: Category) -> list[LeaderboardRow]:
    """
    Lifetime ranking for one category. Read-only and lock-free; counts may lag
    an in-flight submission by a moment.
    Order: count desc, then display name asc, then user id (stable for duplicate names).
    """
    counter = getattr(Member, CATEGORY_COLUMNS[category][1])
    rows = (await session.execute(
        select(Member.user_id, Member.display_name, counter)
        .where(Member.group_id == group_id)
    )).all()
    ranked = sorted(rows, key=lambda r: (-int(r[2] or 0), r[1], r[0]))
    return [LeaderboardRow(user_id=uid, display_name=name, count=int(n or 0)) for (uid, name, n) in ranked]
