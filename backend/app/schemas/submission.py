from __future__ import annotations
from pydantic import BaseModel, Field, field_validator, ConfigDict
from typing import Literal

Category = Literal["gym", "shipping", "mindfulness"]
OutcomeStatus = Literal[
    "accepted",
    "rejected",
    "already_recorded",
    "quota_exceeded",
    "lock_busy",
    "service_unavailable",
    "store_unavailable",
]


class SubmissionEvent(BaseModel):
    """A proof photo handed over by the chat transport. One category per event."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    group_id: str = Field(min_length=1, max_length=64)
    user_id: str = Field(min_length=1, max_length=64)
    display_name: str = Field(min_length=1, max_length=120)
    username: str | None = Field(default=None, max_length=64)
    category: Category
    caption: str = ""
    image_bytes: bytes = Field(repr=False)
    source_message_id: str = Field(min_length=1, max_length=64)

    @field_validator("image_bytes")
    @classmethod
    def non_empty_image(cls, v: bytes):
        if not v:
            raise ValueError("image_bytes must not be empty")
        return v

    @field_validator("username")
    @classmethod
    def strip_at(cls, v: str | None):
        if v is None:
            return None
        v = v.lstrip("@")
        return v or None


class SubmissionOutcome(BaseModel):
    status: OutcomeStatus
    feedback: str | None = None  # classifier text for accepted/rejected
    credited: list[str] = Field(default_factory=list)  # display names given a mindfulness mention credit
    attempts_remaining: int | None = None


class SubmissionDeferred(BaseModel):
    job_id: str
    status: str


class JobStatus(BaseModel):
    job_id: str
    status: str
    outcome: SubmissionOutcome | None = None
