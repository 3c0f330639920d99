from __future__ import annotations
from pydantic import BaseModel, Field, field_validator
from datetime import datetime


class MemberRegister(BaseModel):
    user_id: str = Field(min_length=1, max_length=64)
    display_name: str = Field(min_length=1, max_length=120)
    username: str | None = Field(default=None, max_length=64)

    @field_validator("username")
    @classmethod
    def strip_at(cls, v: str | None):
        if v is None:
            return None
        v = v.strip().lstrip("@")
        return v or None


class MemberPublic(BaseModel):
    group_id: str
    user_id: str
    display_name: str
    username: str | None = None
    gym_count: int
    shipping_count: int
    mindfulness_count: int
    created_at: datetime | None = None
    created: bool = False
