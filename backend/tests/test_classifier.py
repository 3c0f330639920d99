from __future__ import annotations
import asyncio
from types import SimpleNamespace
import httpx
import openai
import pytest

from app.services.classifier import OpenAIClassifier, ClassifierUnavailable, parse_verdict


class FakeCompletions:
    def __init__(self, answer=None, error=None, delay=0.0):
        self.answer = answer
        self.error = error
        self.delay = delay
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        msg = SimpleNamespace(content=self.answer)
        return SimpleNamespace(choices=[SimpleNamespace(message=msg)])


def fake_client(completions: FakeCompletions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


@pytest.mark.parametrize("category,answer,valid,feedback", [
    ("gym", "GYM PIC: Solid deadlift form!", True, "Solid deadlift form!"),
    ("gym", "NOT GYM: That's a cat.", False, "That's a cat."),
    ("shipping", "shipping pic: Clean diff.", True, "Clean diff."),
    ("shipping", "NOT SHIPPING: Show the screen.", False, "Show the screen."),
    ("mindfulness", "ZEN PIC: Calm.", True, "Calm."),
    ("mindfulness", "GYM PIC: wrong category prefix", False, "wrong category prefix"),
    ("gym", "no prefix at all", False, "no prefix at all"),
])
def test_parse_verdict(category, answer, valid, feedback):
    v = parse_verdict(category, answer)
    assert v.valid is valid
    assert v.feedback == feedback


@pytest.mark.parametrize("answer", [None, "", "   "])
def test_empty_answer_is_unavailable(answer):
    with pytest.raises(ClassifierUnavailable):
        parse_verdict("gym", answer)


@pytest.mark.asyncio
async def test_sends_low_detail_image_with_sniffed_mime(png_bytes):
    comp = FakeCompletions(answer="ZEN PIC: Peaceful.")
    clf = OpenAIClassifier(fake_client(comp), model="gpt-4o-mini", timeout=1)

    v = await clf.classify("mindfulness", png_bytes)

    assert v.valid and v.feedback == "Peaceful."
    assert comp.kwargs["model"] == "gpt-4o-mini"
    image_part = comp.kwargs["messages"][1]["content"][1]
    assert image_part["image_url"]["detail"] == "low"
    assert image_part["image_url"]["url"].startswith("data:image/png;base64,")
    assert "ZEN PIC:" in comp.kwargs["messages"][0]["content"]


@pytest.mark.asyncio
async def test_openai_error_maps_to_unavailable():
    err = openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
    clf = OpenAIClassifier(fake_client(FakeCompletions(error=err)), timeout=1)
    with pytest.raises(ClassifierUnavailable):
        await clf.classify("gym", b"bytes")


@pytest.mark.asyncio
async def test_timeout_maps_to_unavailable():
    clf = OpenAIClassifier(fake_client(FakeCompletions(answer="GYM PIC: late", delay=1.0)), timeout=0.05)
    with pytest.raises(ClassifierUnavailable):
        await clf.classify("gym", b"bytes")
