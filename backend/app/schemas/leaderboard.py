from __future__ import annotations
from pydantic import BaseModel
from app.schemas.submission import Category


class LeaderboardRow(BaseModel):
    user_id: str
    display_name: str
    count: int


class Leaderboard(BaseModel):
    group_id: str
    category: Category
    rows: list[LeaderboardRow]
