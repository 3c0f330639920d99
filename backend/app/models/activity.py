from __future__ import annotations
from datetime import date, datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, Boolean, Date, DateTime, CheckConstraint, Index, func
from app.db import Base

# category -> (daily flag column, lifetime counter column)
CATEGORY_COLUMNS = {
    "gym": ("gym_done", "gym_count"),
    "shipping": ("shipping_done", "shipping_count"),
    "mindfulness": ("mindfulness_done", "mindfulness_count"),
}


class DailyActivity(Base):
    """
    One row per (group, member, local date). Only written while the member's
    submission lock is held.
    """
    __tablename__ = "daily_activity"

    group_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    activity_date: Mapped[date] = mapped_column(Date, primary_key=True)

    # each flag flips false -> true at most once per row
    gym_done: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    shipping_done: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    mindfulness_done: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # rejected photos today

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    __table_args__ = (
        CheckConstraint("attempts >= 0", name="ck_daily_activity_attempts_nonneg"),
    )


class Member(Base):
    """Lifetime tallies per (group, member). Counters only ever go up."""
    __tablename__ = "members"

    group_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    display_name: Mapped[str] = mapped_column(String(120), nullable=False)
    username: Mapped[str | None] = mapped_column(String(64), nullable=True)  # chat handle, used to resolve @mentions

    gym_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    shipping_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    mindfulness_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("gym_count >= 0 AND shipping_count >= 0 AND mindfulness_count >= 0", name="ck_members_counts_nonneg"),
        Index("ix_members_group_username", "group_id", "username"),
    )
