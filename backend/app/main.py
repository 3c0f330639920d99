from __future__ import annotations
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from app.config import settings
from app.logging_setup import configure_logging
from app.routes.system import router as system_router
from app.routes.groups import router as groups_router
from app.routes.jobs import router as jobs_router
import structlog

configure_logging()
log = structlog.get_logger()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    log.info(
        "startup",
        env=settings.environment,
        version=settings.app_version,
        git_sha=settings.git_sha,
        lease_duration=settings.lease_duration,
        daily_attempt_cap=settings.daily_attempt_cap,
    )
    if settings.classifier_timeout >= settings.lease_duration:
        log.warning("classifier_timeout_exceeds_lease", timeout=settings.classifier_timeout, lease=settings.lease_duration)
    yield
    # Shutdown
    log.info("shutdown")

app = FastAPI(
    title=f"{settings.app_name} API",
    version=settings.app_version,
    lifespan=lifespan,
    description="Daily proof-of-activity submissions and group leaderboards",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.environment == "dev" else settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(system_router)
app.include_router(groups_router)
app.include_router(jobs_router)

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = rid
    structlog.contextvars.bind_contextvars(request_id=rid)
    try:
        response: Response = await call_next(request)
    finally:
        structlog.contextvars.clear_contextvars()
    response.headers["X-Request-ID"] = rid
    return response
