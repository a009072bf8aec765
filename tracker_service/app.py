"""
FastAPI application for the job-application tracker.

Serves the login and home pages, the account API and the jobs API. The
application factory owns the storage repository: it is built from the
settings (MongoDB when MONGODB_URI is set, otherwise the in-memory
stand-in), handed to handlers through dependencies, and closed on shutdown.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import TrackerSettings, get_settings, validate_config_on_startup
from .errors import TrackerError
from .logger import setup_logging
from .models import HealthResponse
from .repositories import UserRepositoryInterface, get_user_repository
from .routes import auth_router, jobs_router
from .user_service import UserService

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


def _format_validation_error(exc: RequestValidationError) -> str:
    """Flatten pydantic errors into one readable message."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(messages) or "Invalid request"


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(TrackerError)
    async def tracker_error_handler(request: Request, exc: TrackerError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": _format_validation_error(exc)})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(
    settings: Optional[TrackerSettings] = None,
    repository: Optional[UserRepositoryInterface] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Configuration (default: loaded from the environment)
        repository: Storage backend (default: chosen from settings)

    Returns:
        Configured FastAPI app
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_format)
    validate_config_on_startup(settings)

    owns_repository = repository is None
    repository = repository or get_user_repository(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            UserService(repository, settings).ensure_default_user()
        except Exception as e:
            logger.error(f"Failed to create default user from env: {e}")
        yield
        if owns_repository:
            repository.close()

    app = FastAPI(title="Job Tracker", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.repository = repository

    if settings.cors_origins_list:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins_list,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    _register_exception_handlers(app)
    app.include_router(auth_router)
    app.include_router(jobs_router)
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    @app.get("/", include_in_schema=False)
    def login_page() -> FileResponse:
        return FileResponse(STATIC_DIR / "login.html")

    @app.get("/home", include_in_schema=False)
    def home_page() -> FileResponse:
        """
        Served without auth so the page can load; the client validates its
        token against /api/me.
        """
        return FileResponse(STATIC_DIR / "home-page.html")

    @app.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(
            status="healthy",
            storage="memory" if settings.uses_memory_store else "mongodb",
            version=__version__,
            timestamp=datetime.now(timezone.utc),
        )

    return app
