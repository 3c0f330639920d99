from __future__ import annotations
from datetime import datetime, timezone as dt_tz
from typing import Callable
import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import Settings
from app.schemas.submission import SubmissionEvent, SubmissionOutcome
from app.services.activity_day import activity_date
from app.services.classifier import Classifier
from app.services.ledger import ActivityLedger
from app.services.locks import LockManager, LockBusy

log = structlog.get_logger()


def _utcnow() -> datetime:
    return datetime.now(dt_tz.utc)


class SubmissionPipeline:
    """
    event -> lock.hold(group, member) -> ledger -> release.
    Every path resolves to a SubmissionOutcome; nothing raises for a single bad event.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        classifier: Classifier,
        settings: Settings,
        locks: LockManager | None = None,
        now: Callable[[], datetime] = _utcnow,
    ):
        self.locks = locks or LockManager(session_factory, lease_seconds=settings.lease_duration)
        self.ledger = ActivityLedger(session_factory, classifier, attempt_cap=settings.daily_attempt_cap)
        self._tz = settings.activity_timezone
        self._now = now

    async def handle(self, event: SubmissionEvent) -> SubmissionOutcome:
        bound = log.bind(
            group_id=event.group_id,
            user_id=event.user_id,
            category=event.category,
            source_message_id=event.source_message_id,
        )
        day = activity_date(self._now(), self._tz)
        try:
            async with self.locks.hold(event.group_id, event.user_id):
                outcome = await self.ledger.record_attempt_or_success(event, day)
        except LockBusy:
            outcome = SubmissionOutcome(status="lock_busy")
        except (SQLAlchemyError, OSError):
            bound.exception("submission_store_error")
            outcome = SubmissionOutcome(status="store_unavailable")
        except Exception:
            # classifier adapters that leak something other than ClassifierUnavailable
            bound.exception("submission_unexpected_error")
            outcome = SubmissionOutcome(status="service_unavailable")

        bound.info("submission_processed", status=outcome.status, date=day.isoformat(), credited=len(outcome.credited))
        return outcome
