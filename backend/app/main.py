"""FastAPI application entry point."""

import logging
import sys

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.router import api_router
from app.core.errors import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    StorageFailureError,
    TaskCoreError,
)
from app.core.settings import get_settings
from app.db.init_db import init_db

# Configure root logging to show all application logs
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format='%(levelname)s:     %(name)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

# Configure logging levels for different modules
logging.getLogger("sqlalchemy.engine").setLevel(logging.ERROR)
logging.getLogger("sqlalchemy.pool").setLevel(logging.ERROR)
logging.getLogger("sqlalchemy.dialects").setLevel(logging.ERROR)

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidArgumentError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ConflictError: status.HTTP_409_CONFLICT,
    StorageFailureError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


async def task_core_error_handler(request: Request, exc: TaskCoreError) -> JSONResponse:
    """Translate task core errors into JSON responses."""
    status_code = ERROR_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


def create_application() -> FastAPI:
    """Instantiate and configure the FastAPI application."""
    settings = get_settings()

    application = FastAPI(
        title=settings.project_name,
        version=settings.version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url=f"{settings.api_prefix}/openapi.json",
    )

    # CORS middleware for frontend
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://localhost:3001"]
        if settings.environment == "production"
        else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_exception_handler(TaskCoreError, task_core_error_handler)
    application.include_router(api_router, prefix=settings.api_prefix)

    @application.on_event("startup")
    async def startup_event():
        """Initialize database on startup."""
        init_db()

    return application


app = create_application()
