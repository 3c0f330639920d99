from __future__ import annotations
from functools import lru_cache
from typing import AsyncGenerator
from fastapi import Depends
from redis import Redis
from rq import Queue
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from app.config import settings
from app.db import SessionLocal
from app.services.classifier import Classifier, OpenAIClassifier


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return SessionLocal


async def get_session(
    factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> AsyncGenerator[AsyncSession, None]:
    async with factory() as session:
        yield session


@lru_cache(maxsize=1)
def _openai_classifier() -> OpenAIClassifier:
    return OpenAIClassifier.from_settings(settings)


def get_classifier() -> Classifier:
    return _openai_classifier()


@lru_cache(maxsize=1)
def _redis() -> Redis:
    return Redis.from_url(settings.redis_url)


def get_queue() -> Queue:
    return Queue("default", connection=_redis())
