from __future__ import annotations
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, BigInteger
from app.db import Base


class SubmissionLock(Base):
    """
    Leased mutual exclusion per (group, member).

    States:
      - absent        => no row
      - held-valid    => now_ms <  expires_at_ms
      - held-expired  => now_ms >= expires_at_ms (free for acquisition, row is overwritten)

    Times are epoch milliseconds so the lease comparison is numeric on every backend.
    """
    __tablename__ = "submission_locks"

    group_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    owner_token: Mapped[str] = mapped_column(String(64), nullable=False)  # "{pid}:{uuid hex}", unique per acquisition
    acquired_at_ms: Mapped[int] = mapped_column(BigInteger, nullable=False)
    expires_at_ms: Mapped[int] = mapped_column(BigInteger, nullable=False)
