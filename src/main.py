"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api import auth, projects, task_lists, tasks, trash
from src.config import get_settings
from src.services.errors import (
    Forbidden,
    InvalidState,
    LifecycleError,
    NotFound,
    PreconditionFailed,
)

logger = logging.getLogger(__name__)
settings = get_settings()

LIFECYCLE_ERROR_STATUS = {
    NotFound: status.HTTP_404_NOT_FOUND,
    Forbidden: status.HTTP_403_FORBIDDEN,
    PreconditionFailed: status.HTTP_409_CONFLICT,
    InvalidState: status.HTTP_409_CONFLICT,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    yield


app = FastAPI(
    title="Taskhub API",
    description="Projects, task lists and tasks with a restorable trash",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for development
if settings.is_development:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://localhost:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(LifecycleError)
async def lifecycle_error_handler(request: Request, exc: LifecycleError) -> JSONResponse:
    """Turn lifecycle failures into HTTP responses."""
    status_code = LIFECYCLE_ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    logger.info(f"{request.method} {request.url.path} -> {status_code} ({exc.code})")
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.code},
    )


# Register routers
app.include_router(auth.router)
app.include_router(projects.router)
app.include_router(task_lists.router)
app.include_router(tasks.router)
app.include_router(trash.router)
app.include_router(trash.project_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}
