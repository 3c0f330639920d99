from __future__ import annotations
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase
from app.config import settings

class Base(DeclarativeBase):
    pass

engine = create_async_engine(settings.database_url, future=True, echo=False)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False)

def upsert(session: AsyncSession, model):
    """INSERT builder with ON CONFLICT support for the session's backend (postgres in prod, sqlite in tests)."""
    if session.bind.dialect.name == "sqlite":
        return sqlite.insert(model)
    return postgresql.insert(model)
