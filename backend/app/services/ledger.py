from __future__ import annotations
from dataclasses import dataclass
from datetime import date
import structlog
from sqlalchemy import update, func, false
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.db import upsert
from app.models.activity import DailyActivity, Member, CATEGORY_COLUMNS
from app.schemas.submission import Category, SubmissionEvent, SubmissionOutcome
from app.services.captions import extract_mentions
from app.services.classifier import Classifier, ClassifierUnavailable

log = structlog.get_logger()


@dataclass(frozen=True)
class DailyRecord:
    gym_done: bool = False
    shipping_done: bool = False
    mindfulness_done: bool = False
    attempts: int = 0

    def done(self, category: Category) -> bool:
        return bool(getattr(self, CATEGORY_COLUMNS[category][0]))


# ---------- reads ----------

async def daily_record(session: AsyncSession, group_id: str, user_id: str, activity_date: date) -> DailyRecord:
    row = await session.get(DailyActivity, (group_id, user_id, activity_date))
    if row is None:
        return DailyRecord()
    return DailyRecord(
        gym_done=bool(row.gym_done),
        shipping_done=bool(row.shipping_done),
        mindfulness_done=bool(row.mindfulness_done),
        attempts=int(row.attempts or 0),
    )


# ---------- writes (caller holds the member's submission lock) ----------

async def add_attempt(session: AsyncSession, group_id: str, user_id: str, activity_date: date) -> None:
    ins = upsert(session, DailyActivity).values(
        group_id=group_id, user_id=user_id, activity_date=activity_date, attempts=1,
        gym_done=False, shipping_done=False, mindfulness_done=False,
    )
    await session.execute(
        ins.on_conflict_do_update(
            index_elements=[DailyActivity.group_id, DailyActivity.user_id, DailyActivity.activity_date],
            set_={"attempts": DailyActivity.attempts + 1, "updated_at": func.now()},
        )
    )


async def mark_done(session: AsyncSession, group_id: str, user_id: str, activity_date: date, category: Category) -> bool:
    """Flip the category flag to true. Returns False if it was already true (nothing written)."""
    flag, _ = CATEGORY_COLUMNS[category]
    values = {"gym_done": False, "shipping_done": False, "mindfulness_done": False, flag: True}
    ins = upsert(session, DailyActivity).values(
        group_id=group_id, user_id=user_id, activity_date=activity_date, attempts=0, **values
    )
    res = await session.execute(
        ins.on_conflict_do_update(
            index_elements=[DailyActivity.group_id, DailyActivity.user_id, DailyActivity.activity_date],
            set_={flag: True, "updated_at": func.now()},
            where=getattr(DailyActivity, flag) == false(),
        ).returning(DailyActivity.activity_date)
    )
    return res.first() is not None


async def bump_lifetime(
    session: AsyncSession,
    group_id: str,
    user_id: str,
    category: Category,
    display_name: str,
    username: str | None,
) -> None:
    """Counter-add on the member row, creating it on first accepted submission."""
    _, counter = CATEGORY_COLUMNS[category]
    counts = {"gym_count": 0, "shipping_count": 0, "mindfulness_count": 0, counter: 1}
    ins = upsert(session, Member).values(
        group_id=group_id, user_id=user_id, display_name=display_name, username=username, **counts
    )
    set_ = {counter: getattr(Member, counter) + 1, "display_name": ins.excluded.display_name}
    if username:
        set_["username"] = ins.excluded.username
    await session.execute(
        ins.on_conflict_do_update(index_elements=[Member.group_id, Member.user_id], set_=set_)
    )


async def credit_mentions(session: AsyncSession, group_id: str, actor_id: str, handles: list[str]) -> list[str]:
    """
    +1 mindfulness for every registered member named by handle, in one UPDATE
    (n = n + 1, so concurrent credits add up). The actor is never credited.
    Returns the credited display names.
    """
    keys = sorted({h.lower().lstrip("@") for h in handles if h and h.strip("@")})
    if not keys:
        return []
    res = await session.execute(
        update(Member)
        .where(
            Member.group_id == group_id,
            Member.user_id != actor_id,
            func.lower(Member.username).in_(keys),
        )
        .values(mindfulness_count=Member.mindfulness_count + 1)
        .returning(Member.display_name)
        .execution_options(synchronize_session=False)
    )
    return sorted(res.scalars().all())


# ---------- the state machine ----------

class ActivityLedger:
    """
    Per (group, member, date) bookkeeping for proof submissions.

    Per category: untried --accepted--> recorded (terminal for the day);
    untried --rejected--> untried with attempts+1, until attempts == cap
    (exhausted, terminal for the day). Classifier outages never cost an attempt.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], classifier: Classifier, attempt_cap: int = 5):
        if attempt_cap < 1:
            raise ValueError("attempt_cap must be >= 1")
        self._sessions = session_factory
        self._classifier = classifier
        self.attempt_cap = attempt_cap

    async def record_attempt_or_success(self, event: SubmissionEvent, activity_date: date) -> SubmissionOutcome:
        group_id, user_id, category = event.group_id, event.user_id, event.category

        # short read transaction; nothing is held open across the classifier call
        async with self._sessions() as session:
            record = await daily_record(session, group_id, user_id, activity_date)

        if record.done(category):
            return SubmissionOutcome(status="already_recorded")
        if record.attempts >= self.attempt_cap:
            return SubmissionOutcome(status="quota_exceeded", attempts_remaining=0)

        try:
            verdict = await self._classifier.classify(category, event.image_bytes)
        except ClassifierUnavailable:
            return SubmissionOutcome(
                status="service_unavailable", attempts_remaining=self.attempt_cap - record.attempts
            )

        if not verdict.valid:
            async with self._sessions() as session:
                async with session.begin():
                    await add_attempt(session, group_id, user_id, activity_date)
            return SubmissionOutcome(
                status="rejected",
                feedback=verdict.feedback,
                attempts_remaining=max(0, self.attempt_cap - record.attempts - 1),
            )

        credited: list[str] = []
        async with self._sessions() as session:
            async with session.begin():
                if not await mark_done(session, group_id, user_id, activity_date, category):
                    # another holder recorded this category first
                    return SubmissionOutcome(status="already_recorded")
                await bump_lifetime(session, group_id, user_id, category, event.display_name, event.username)
                if category == "mindfulness":
                    credited = await credit_mentions(session, group_id, user_id, extract_mentions(event.caption))

        if credited:
            log.info("mention_credit", group_id=group_id, user_id=user_id, credited=credited)
        return SubmissionOutcome(
            status="accepted",
            feedback=verdict.feedback,
            credited=credited,
            attempts_remaining=self.attempt_cap - record.attempts,
        )
