from __future__ import annotations
import os
from pydantic import BaseModel

class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "dev")
    app_name: str = os.getenv("APP_NAME", "proofboard-api")
    app_version: str = os.getenv("APP_VERSION", "0.1.0")
    git_sha: str = os.getenv("GIT_SHA", "dev")
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    database_url: str = os.getenv("DATABASE_URL", "postgresql+asyncpg://postgres:postgres@db:5432/proofboard_dev")
    redis_url: str = os.getenv("REDIS_URL", "redis://redis:6379/0")

    # Submission pipeline
    lease_duration: float = float(os.getenv("LEASE_DURATION", "10"))  # seconds a per-member lock is held at most
    daily_attempt_cap: int = int(os.getenv("DAILY_ATTEMPT_CAP", "5"))
    activity_timezone: str = os.getenv("ACTIVITY_TIMEZONE", "UTC")  # which calendar day a submission counts for

    # Photo classification
    openai_api_key: str = os.getenv("OPENAI_API_KEY", "")
    openai_model: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    classifier_timeout: float = float(os.getenv("CLASSIFIER_TIMEOUT", "8"))  # keep below lease_duration

settings = Settings()
