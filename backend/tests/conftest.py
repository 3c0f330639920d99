from __future__ import annotations
import asyncio
import io
import pytest
import pytest_asyncio
from PIL import Image
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

from app.config import Settings
from app.db import Base
from app.services.classifier import Classification, ClassifierUnavailable
import app.models.lock  # noqa: F401  register tables
import app.models.activity  # noqa: F401


class FakeClassifier:
    """Scriptable stand-in for the vision model."""

    def __init__(self, valid: bool = True, feedback: str = "looks legit", error: Exception | None = None):
        self.valid = valid
        self.feedback = feedback
        self.error = error
        self.calls: list[str] = []
        self.entered = asyncio.Event()
        self.gate: asyncio.Event | None = None

    async def classify(self, category, image_bytes):
        self.calls.append(category)
        self.entered.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return Classification(valid=self.valid, feedback=self.feedback)


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'proofboard.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def classifier():
    return FakeClassifier()


@pytest.fixture
def unavailable_classifier():
    return FakeClassifier(error=ClassifierUnavailable("model down"))


@pytest.fixture
def test_settings():
    return Settings(lease_duration=10, daily_attempt_cap=5, activity_timezone="UTC")


@pytest.fixture
def png_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), (200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()
