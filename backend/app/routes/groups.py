from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Path, Query, Form, File, UploadFile, Response
from pydantic import ValidationError
from rq import Queue
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
import structlog

from app.config import settings
from app.deps import get_session, get_session_factory, get_classifier, get_queue
from app.schemas.leaderboard import Leaderboard
from app.schemas.member import MemberRegister, MemberPublic
from app.schemas.submission import Category, SubmissionEvent, SubmissionOutcome, SubmissionDeferred
from app.services.captions import category_from_caption
from app.services.classifier import Classifier
from app.services.media import validate_image
from app.services.members import register_member
from app.services.pipeline import SubmissionPipeline
from app.services.ranking import leaderboard
from app.jobs.process_submission import event_to_payload

router = APIRouter(prefix="/groups", tags=["groups"])
log = structlog.get_logger()


@router.post("/{group_id}/members", response_model=MemberPublic)
async def register(
    payload: MemberRegister,
    response: Response,
    group_id: str = Path(min_length=1, max_length=64),
    session: AsyncSession = Depends(get_session),
):
    member, created = await register_member(
        session, group_id, payload.user_id, payload.display_name, payload.username
    )
    response.status_code = 201 if created else 200
    return MemberPublic(
        group_id=member.group_id,
        user_id=member.user_id,
        display_name=member.display_name,
        username=member.username,
        gym_count=member.gym_count,
        shipping_count=member.shipping_count,
        mindfulness_count=member.mindfulness_count,
        created_at=member.created_at,
        created=created,
    )


@router.post("/{group_id}/submissions", response_model=SubmissionOutcome | SubmissionDeferred)
async def submit(
    response: Response,
    group_id: str = Path(min_length=1, max_length=64),
    user_id: str = Form(...),
    display_name: str = Form(...),
    source_message_id: str = Form(...),
    caption: str = Form(default=""),
    category: Category | None = Form(default=None),
    username: str | None = Form(default=None),
    image: UploadFile = File(...),
    defer: bool = Query(default=False, description="Queue the submission and return a job id"),
    factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    classifier: Classifier = Depends(get_classifier),
    queue: Queue = Depends(get_queue),
):
    cat = category or category_from_caption(caption)
    if cat is None:
        raise HTTPException(status_code=422, detail="No activity category in caption")

    data = await image.read()
    try:
        validate_image(data)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        event = SubmissionEvent(
            group_id=group_id,
            user_id=user_id,
            display_name=display_name,
            username=username,
            category=cat,
            caption=caption,
            image_bytes=data,
            source_message_id=source_message_id,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_input=False))

    if defer:
        job = queue.enqueue("app.jobs.process_submission.process_submission", event_to_payload(event))
        log.info("submission_enqueued", group_id=group_id, user_id=user_id, job_id=job.id)
        response.status_code = 202
        return SubmissionDeferred(job_id=job.id, status="queued")

    pipeline = SubmissionPipeline(factory, classifier, settings)
    return await pipeline.handle(event)


@router.get("/{group_id}/leaderboard", response_model=Leaderboard)
async def get_leaderboard(
    group_id: str = Path(min_length=1, max_length=64),
    category: Category = Query(default="gym"),
    session: AsyncSession = Depends(get_session),
):
    rows = await leaderboard(session, group_id, category)
    return Leaderboard(group_id=group_id, category=category, rows=rows)
