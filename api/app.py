"""Job Hunt HTTP API.

Every route under /api/v1 runs as the user owning the X-API-Key header.
Service exceptions become JSON errors in one handler below.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from services.exceptions import (
    JobHuntError,
    ConfigurationError,
    ProfileNotFoundError,
    ListingNotFoundError,
    InvalidTransitionError,
    GenerationFailedError,
    ValidationError,
)

from .auth import get_or_create_api_key
from .dependencies import get_settings, get_task_manager
from .routers import apply, jobs, profile, scan, tasks

logger = logging.getLogger(__name__)

# Map service exceptions to HTTP status codes
EXCEPTION_STATUS_MAP = {
    ConfigurationError: 500,
    ProfileNotFoundError: 400,
    ListingNotFoundError: 404,
    ValidationError: 422,
    InvalidTransitionError: 409,
    GenerationFailedError: 502,
}


def create_app() -> FastAPI:
    """Build the app. Used as a uvicorn factory by `jobhunt serve`."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings = get_settings()
        api_key = get_or_create_api_key(settings)
        logger.info("Job Hunt API starting (data dir %s)", settings.data_dir)
        print(f"\n  Local user key: {api_key}\n")
        yield
        # Shutdown: let background scans finish their writes
        await get_task_manager().wait_all()

    app = FastAPI(
        title="Job Hunt API",
        description="REST API for job discovery, fit scoring and application documents",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS, localhost on any port
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=r"https?://localhost(:\d+)?",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount routers under /api/v1
    prefix = "/api/v1"
    app.include_router(profile.router, prefix=prefix, tags=["Profile"])
    app.include_router(scan.router, prefix=prefix, tags=["Scan"])
    app.include_router(apply.router, prefix=prefix, tags=["Apply"])
    app.include_router(jobs.router, prefix=prefix, tags=["Jobs"])
    app.include_router(tasks.router, prefix=prefix, tags=["Tasks"])

    # One status code per service exception; anything unmapped is a 500
    @app.exception_handler(JobHuntError)
    async def job_hunt_error_handler(request: Request, exc: JobHuntError):
        status_code = EXCEPTION_STATUS_MAP.get(type(exc), 500)
        if status_code >= 500:
            logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc)
        return JSONResponse(
            status_code=status_code,
            content={"success": False, "error": type(exc).__name__, "detail": str(exc)},
        )

    # No auth
    @app.get("/health", tags=["System"])
    async def health():
        return {"status": "ok"}

    return app
