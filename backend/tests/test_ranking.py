from __future__ import annotations
import pytest
from sqlalchemy import update

from app.models.activity import Member
from app.services.members import register_member
from app.services.ranking import leaderboard


async def _seed(session, group_id, user_id, name, **counts):
    await register_member(session, group_id, user_id, name)
    if counts:
        await session.execute(
            update(Member).where(Member.group_id == group_id, Member.user_id == user_id).values(**counts)
        )
        await session.commit()


@pytest.mark.asyncio
async def test_ties_broken_by_display_name(session_factory):
    async with session_factory() as s:
        await _seed(s, "g1", "u-a", "A", gym_count=3)
        await _seed(s, "g1", "u-c", "C", gym_count=5)
        await _seed(s, "g1", "u-b", "B", gym_count=5)
        await _seed(s, "g2", "u-z", "Z", gym_count=50)

        rows = await leaderboard(s, "g1", "gym")

    assert [(r.display_name, r.count) for r in rows] == [("B", 5), ("C", 5), ("A", 3)]


@pytest.mark.asyncio
async def test_selects_counter_for_category(session_factory):
    async with session_factory() as s:
        await _seed(s, "g1", "u1", "Alice", gym_count=9, mindfulness_count=1)
        await _seed(s, "g1", "u2", "Bob", gym_count=1, mindfulness_count=4)
        await _seed(s, "g1", "u3", "Cy")

        zen = await leaderboard(s, "g1", "mindfulness")
        ship = await leaderboard(s, "g1", "shipping")

    assert [r.display_name for r in zen] == ["Bob", "Alice", "Cy"]
    assert [r.count for r in ship] == [0, 0, 0]
    assert [r.display_name for r in ship] == ["Alice", "Bob", "Cy"]


@pytest.mark.asyncio
async def test_empty_group(session_factory):
    async with session_factory() as s:
        assert await leaderboard(s, "nobody", "gym") == []
