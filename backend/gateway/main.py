from __future__ import annotations
import asyncio
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from minio.error import S3Error
from urllib3.exceptions import HTTPError as Urllib3HTTPError
from gateway.config import settings
from gateway.logging_setup import configure_logging
from gateway.routes.system import router as system_router
from gateway.routes.auth import router as auth_router
from gateway.routes.submissions import router as submissions_router
from gateway.routes.admin import router as admin_router
from gateway.services.storage import get_object_store
import structlog

configure_logging()
log = structlog.get_logger()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    log.info(
        "startup", env=settings.environment, version=settings.app_version, git_sha=settings.git_sha,
        submission_store=settings.submission_store, file_storage=settings.file_storage,
        smtp_configured=settings.smtp_configured,
    )
    if not settings.smtp_configured:
        log.warning("smtp_not_configured", detail="emails will be logged instead of sent")
    if settings.file_storage == "object":
        try:
            await asyncio.to_thread(get_object_store().ensure_bucket)
        except (S3Error, Urllib3HTTPError) as e:
            log.warning("bucket_check_failed", bucket=settings.s3_bucket_uploads, error=str(e))
    yield
    # Shutdown
    log.info("shutdown")

app = FastAPI(
    title=f"{settings.app_display_name} API",
    version=settings.app_version,
    lifespan=lifespan,
    description=f"{settings.app_display_name} API for project intake and triage",
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
app.include_router(auth_router)
app.include_router(submissions_router)
app.include_router(admin_router)

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
