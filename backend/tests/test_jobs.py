from __future__ import annotations
import pytest

from app.jobs.process_submission import _run, event_to_payload, payload_to_event
from app.schemas.submission import SubmissionEvent


def _event() -> SubmissionEvent:
    return SubmissionEvent(
        group_id="g1", user_id="u1", display_name="Alice", username="@alice",
        category="shipping", caption="/shipped", image_bytes=b"\x00\x01raw", source_message_id="m9",
    )


def test_payload_is_json_safe_and_restores_image():
    payload = event_to_payload(_event())
    assert isinstance(payload["image_b64"], str)
    assert "image_bytes" not in payload
    restored = payload_to_event(payload)
    assert restored.image_bytes == b"\x00\x01raw"
    assert restored.username == "alice"


def test_payload_without_image_is_invalid():
    payload = event_to_payload(_event())
    payload.pop("image_b64")
    with pytest.raises(ValueError):
        payload_to_event(payload)


@pytest.mark.asyncio
async def test_job_runs_pipeline(session_factory, classifier):
    result = await _run(event_to_payload(_event()), session_factory=session_factory, classifier=classifier)
    assert result["status"] == "accepted"
    assert classifier.calls == ["shipping"]
