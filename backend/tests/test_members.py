from __future__ import annotations
import pytest
from sqlalchemy import update

from app.models.activity import Member
from app.services.members import register_member


@pytest.mark.asyncio
async def test_register_is_idempotent_and_keeps_counters(session_factory):
    async with session_factory() as s:
        m, created = await register_member(s, "g1", "u1", "Alice", "alice")
        assert created
        assert (m.gym_count, m.shipping_count, m.mindfulness_count) == (0, 0, 0)

        await s.execute(update(Member).where(Member.user_id == "u1").values(gym_count=4))
        await s.commit()

        m, created = await register_member(s, "g1", "u1", "Alice B", None)
        assert not created
        assert m.gym_count == 4
        assert m.display_name == "Alice B"
        assert m.username == "alice"  # not cleared by a registration without handle


@pytest.mark.asyncio
async def test_same_user_in_two_groups(session_factory):
    async with session_factory() as s:
        _, a = await register_member(s, "g1", "u1", "Alice")
        _, b = await register_member(s, "g2", "u1", "Alice")
    assert a and b
