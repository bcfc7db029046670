#!/usr/bin/env python3
"""
Job Board Service

This FastAPI service exposes CRUD endpoints for job postings under
``/api/jobs`` and serves uploaded logos under ``/uploads``.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from ... import __version__
from ...config import Settings, get_settings
from ...db.repository import JobRepository
from ...logging_config import setup_logging
from ...models.job import JobValidationError
from ...utils.uploads import UploadError
from .routes import router

logger = logging.getLogger(__name__)


async def upload_error_handler(request: Request, exc: UploadError) -> JSONResponse:
    logger.warning(f"Upload rejected on {request.url.path}: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


async def validation_error_handler(request: Request, exc: JobValidationError) -> JSONResponse:
    logger.warning(f"Invalid body on {request.url.path}: {exc}")
    return JSONResponse(status_code=400, content={"error": str(exc)})


def create_app(
    settings: Optional[Settings] = None, repository: Optional[JobRepository] = None
) -> FastAPI:
    """Build the job board application.

    Args:
        settings: Runtime configuration, defaults to the module singleton
        repository: Storage client, defaults to a SQLite repository at
            ``settings.db_path``

    Returns:
        FastAPI: Application with routes, CORS and the uploads mount
    """
    settings = settings or get_settings()
    repository = repository or JobRepository(settings.db_path)

    setup_logging("jobboard", settings.log_level, settings.log_dir)
    os.makedirs(settings.upload_dir, exist_ok=True)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the storage connection for the lifetime of the app."""
        await repository.connect()
        logger.info("Job board service started")
        try:
            yield
        finally:
            await repository.close()
            logger.info("Job board service stopped")

    app = FastAPI(
        title="Job Board Service",
        description="CRUD API for job postings with optional logo uploads",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.repository = repository

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(UploadError, upload_error_handler)
    app.add_exception_handler(JobValidationError, validation_error_handler)

    @app.get("/health")
    async def health_check():
        """Health check endpoint for container healthchecks."""
        if await repository.check_connection():
            return {"status": "healthy", "database": "connected"}
        return JSONResponse(
            status_code=503, content={"status": "unhealthy", "database": "disconnected"}
        )

    app.include_router(router)
    app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")
    return app


def main() -> None:
    """Run the service with uvicorn."""
    load_dotenv()
    settings = Settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
