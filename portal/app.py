"""
Backoffice Portal - Backend API
FastAPI over the configured data source
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from common.auth import AuthenticationError, PermissionDenied
from common.config import ServiceConfig, get_config
from common.runtime import setup_logging
from common.storage import DataSource, DataStoreError, RecordNotFound, create_data_source
from modules.approvals import InvalidTransition

from .routers import admin, approvals, dashboard, health, projects, timesheets

logger = logging.getLogger(__name__)

VERSION = "1.0.0"

# exception -> HTTP status; the most specific class wins
ERROR_STATUS = {
    AuthenticationError: 401,
    PermissionDenied: 403,
    RecordNotFound: 404,
    InvalidTransition: 409,
    ValueError: 422,
    DataStoreError: 503,
}


def _error_handler(status_code: int):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        if status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        else:
            logger.warning(f"{request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})
    return handler


def create_app(config: Optional[ServiceConfig] = None, source: Optional[DataSource] = None) -> FastAPI:
    """Build the API; ``source`` overrides the configured data source."""
    config = config or get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.source = source or create_data_source(config.data_source)
        await app.state.source.init()
        logger.info(f"Backoffice API v{app.version} started")
        logger.info(f"Data source: {app.state.source.name}")
        yield
        logger.info("Shutting down")
        await app.state.source.close()

    app = FastAPI(
        title="Backoffice Portal API",
        description="Projects, timesheets, approvals & financial controlling",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.config = config

    for exc_class, status_code in ERROR_STATUS.items():
        app.add_exception_handler(exc_class, _error_handler(status_code))

    app.include_router(health.router, tags=["Health"])
    app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])
    app.include_router(projects.router, prefix="/api/projects", tags=["Projects"])
    app.include_router(approvals.router, prefix="/api/approvals", tags=["Approvals"])
    app.include_router(timesheets.router, prefix="/api/timesheets", tags=["Timesheets"])
    app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])

    @app.get("/")
    async def root():
        return {
            "name": "Backoffice Portal API",
            "version": VERSION,
            "docs": "/docs",
            "health": "/health",
        }

    return app


def main():
    import uvicorn

    config = get_config()
    setup_logging(config)
    uvicorn.run(create_app(config), host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
