"""FastAPI application for the release manager.

This module exposes the release workflows over HTTP for a UI layer:
- GET /info - Repository, latest release and release branch
- POST /release-candidates - Cut the next release candidate
- GET /health - Health check for load balancers and monitoring
- Automatic OpenAPI/Swagger documentation at /docs

Architecture notes:
- FastAPI handles HTTP concerns (routing, serialization)
- ReleaseManager handles the workflows
- Pydantic schemas are shared between both layers for consistency
- Exception handlers translate release-manager errors into JSON responses

To run locally:
    uvicorn release_manager.main:app --reload --port 8000
"""

from __future__ import annotations

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from release_manager import __version__
from release_manager.config import load_project_config
from release_manager.errors import GitHubApiError, GitHubReleaseManagerError
from release_manager.logging_config import get_logger, setup_logging
from release_manager.manager import ReleaseManager
from release_manager.schemas import CreateRcResponse, GitHubBatchInfo

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Application Lifespan (startup/shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the ReleaseManager once at startup."""
    setup_logging()
    config = load_project_config()
    app.state.manager = ReleaseManager.from_config(config)
    logger.info("service_started", repo=config.full_name)
    yield


# ---------------------------------------------------------------------------
# FastAPI App
# ---------------------------------------------------------------------------

app = FastAPI(
    title="GitHub Release Manager",
    description="Cut release-candidate branches and releases on GitHub",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        start = time.time()
        response = await call_next(request)
        duration = time.time() - start
        response.headers["X-Process-Time"] = f"{duration:.2f}s"
        logger.info(
            "http_request",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration=round(duration, 3),
        )
        return response


app.add_middleware(LoggingMiddleware)


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


@app.exception_handler(GitHubReleaseManagerError)
async def release_manager_error_handler(
    request: Request, exc: GitHubReleaseManagerError
) -> JSONResponse:
    """Domain errors (e.g. the release branch already exists) are conflicts."""
    return JSONResponse(
        status_code=409,
        content={"error": "release_manager_error", "detail": str(exc)},
    )


@app.exception_handler(GitHubApiError)
async def github_api_error_handler(request: Request, exc: GitHubApiError) -> JSONResponse:
    """GitHub failures are reported as a bad gateway with GitHub's own status."""
    return JSONResponse(
        status_code=502,
        content={
            "error": "github_api_error",
            "status_code": exc.status_code,
            "detail": exc.message,
        },
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "healthy"}


@app.get("/info", response_model=GitHubBatchInfo)
async def get_info(request: Request) -> GitHubBatchInfo:
    """Return repository metadata, the latest release and its branch."""
    manager: ReleaseManager = request.app.state.manager
    return await manager.get_batch_info()


@app.post("/release-candidates", response_model=CreateRcResponse)
async def create_release_candidate(request: Request) -> CreateRcResponse:
    """Cut the next release candidate and return the steps taken.

    Returns:
        The ordered ResponseSteps of the creation pipeline

    Raises:
        GitHubReleaseManagerError: 409 if the release branch already exists
        GitHubApiError: 502 if a GitHub call fails
    """
    manager: ReleaseManager = request.app.state.manager
    steps = await manager.create_release_candidate()
    return CreateRcResponse(steps=steps)
