from __future__ import annotations
import asyncio
import base64
from app.config import settings
from app.db import SessionLocal
from app.deps import get_classifier
from app.schemas.submission import SubmissionEvent
from app.services.pipeline import SubmissionPipeline


def event_to_payload(event: SubmissionEvent) -> dict:
    """JSON-safe job payload; image travels base64-encoded through redis."""
    data = event.model_dump(exclude={"image_bytes"})
    data["image_b64"] = base64.b64encode(event.image_bytes).decode("ascii")
    return data


def payload_to_event(payload: dict) -> SubmissionEvent:
    data = dict(payload)
    data["image_bytes"] = base64.b64decode(data.pop("image_b64", "") or b"")
    return SubmissionEvent.model_validate(data)


async def _run(payload: dict, session_factory=None, classifier=None) -> dict:
    event = payload_to_event(payload)
    pipeline = SubmissionPipeline(
        session_factory or SessionLocal,
        classifier or get_classifier(),
        settings,
    )
    outcome = await pipeline.handle(event)
    return outcome.model_dump(mode="json")


def process_submission(payload: dict) -> dict:
    # RQ entry point (sync); run the async coroutine
    return asyncio.run(_run(payload))
