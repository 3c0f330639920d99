from __future__ import annotations
import asyncio
import base64
from dataclasses import dataclass
from typing import Protocol
import openai
import structlog

from app.schemas.submission import Category
from app.services.media import sniff_mime

log = structlog.get_logger()


@dataclass(frozen=True)
class Classification:
    valid: bool
    feedback: str


class ClassifierUnavailable(Exception):
    """The vision model gave no verdict (timeout, transport error, empty answer)."""


class Classifier(Protocol):
    async def classify(self, category: Category, image_bytes: bytes) -> Classification: ...


@dataclass(frozen=True)
class _Prompt:
    system: str
    question: str
    accept_prefix: str


_PROMPTS: dict[str, _Prompt] = {
    "gym": _Prompt(
        system=(
            "You're a supportive and motivating activity tracker analyzing gym photos. "
            "For valid gym pics (must show workout equipment, exercise in progress, or post-workout), "
            "start with 'GYM PIC:' then give an encouraging response that recognizes their dedication "
            "(max 20 words). For non-gym pics, start with 'NOT GYM:' then provide gentle guidance "
            "(max 15 words)."
        ),
        question=(
            "Analyze this image. Is it a gym pic? Respond with the appropriate prefix "
            "('GYM PIC:' or 'NOT GYM:') followed by your motivating message."
        ),
        accept_prefix="GYM PIC:",
    ),
    "shipping": _Prompt(
        system=(
            "You're an encouraging activity tracker analyzing work progress. "
            "For valid shipping pics (computer screens showing code or development work, presentations "
            "or project discussions, documentation or planning work, team meetings, or other evidence of "
            "productive contribution), start with 'SHIPPING PIC:' then give an uplifting response "
            "(max 20 words). For non-shipping pics, start with 'NOT SHIPPING:' then provide constructive "
            "guidance (max 15 words)."
        ),
        question=(
            "Analyze this image. Is it a valid shipping pic showing work progress? Respond with the "
            "appropriate prefix ('SHIPPING PIC:' or 'NOT SHIPPING:') followed by your encouraging message."
        ),
        accept_prefix="SHIPPING PIC:",
    ),
    "mindfulness": _Prompt(
        system=(
            "You're a mindful activity tracker analyzing spiritual growth photos. "
            "For valid mindfulness pics (showing meditation, yoga, or other mindful practices), start with "
            "'ZEN PIC:' then give an appreciative response (max 20 words). For non-mindfulness pics, start "
            "with 'NOT ZEN:' then provide gentle guidance toward mindful practice (max 15 words)."
        ),
        question=(
            "Analyze this image. Is it a mindfulness pic? Respond with the appropriate prefix "
            "('ZEN PIC:' or 'NOT ZEN:') followed by your message."
        ),
        accept_prefix="ZEN PIC:",
    ),
}


def parse_verdict(category: Category, answer: str | None) -> Classification:
    """
    Turn a model answer like "GYM PIC: Great form!" into a Classification.
    Raises ClassifierUnavailable when there is nothing to judge.
    """
    if not answer or not answer.strip():
        raise ClassifierUnavailable("empty model answer")
    text = answer.strip()
    valid = text.upper().startswith(_PROMPTS[category].accept_prefix)
    comment = text[text.index(":") + 1:].strip() if ":" in text else text
    return Classification(valid=valid, feedback=comment)


class OpenAIClassifier:
    """Vision classification through the OpenAI chat completions API."""

    def __init__(
        self,
        client: openai.AsyncOpenAI,
        model: str = "gpt-4o-mini",
        timeout: float = 8.0,
        max_tokens: int = 50,
    ):
        self._client = client
        self._model = model
        self._timeout = timeout
        self._max_tokens = max_tokens

    @classmethod
    def from_settings(cls, s) -> "OpenAIClassifier":
        if not s.openai_api_key:
            # calls will fail with an auth error and surface as service_unavailable
            log.warning("openai_api_key_missing")
        client = openai.AsyncOpenAI(api_key=s.openai_api_key or "unset", timeout=s.classifier_timeout, max_retries=0)
        return cls(client, model=s.openai_model, timeout=s.classifier_timeout)

    def _messages(self, category: Category, image_bytes: bytes) -> list[dict]:
        prompt = _PROMPTS[category]
        mime = sniff_mime(image_bytes) or "image/jpeg"
        b64 = base64.b64encode(image_bytes).decode("ascii")
        return [
            {"role": "system", "content": prompt.system},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt.question},
                    {"type": "image_url", "image_url": {"url": f"data:{mime};base64,{b64}", "detail": "low"}},
                ],
            },
        ]

    async def classify(self, category: Category, image_bytes: bytes) -> Classification:
        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self._model,
                    messages=self._messages(category, image_bytes),
                    max_tokens=self._max_tokens,
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            log.warning("classifier_timeout", category=category, timeout=self._timeout)
            raise ClassifierUnavailable("classification timed out") from e
        except openai.OpenAIError as e:
            log.warning("classifier_error", category=category, error=str(e))
            raise ClassifierUnavailable(str(e)) from e

        answer = response.choices[0].message.content if response.choices else None
        return parse_verdict(category, answer)
