"""FastAPI application entrypoint for the product database service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from productdb.api.middleware.logging import LoggingMiddleware
from productdb.api.middleware.timeout import TimeoutMiddleware
from productdb.api.routes import admin, families, helpers, products, relationships, vendors, versions
from productdb.core.config import settings
from productdb.core.database import database_manager
from productdb.core.exceptions import ApplicationError, BadInputError
from productdb.core.observability import setup_tracing
from productdb.utils.monitoring import observe_error

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    """Initialize the storage adapter on startup and release it on shutdown."""

    await database_manager.initialize()
    try:
        yield
    finally:
        await database_manager.close()


app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
    docs_url="/docs" if settings.openapi_enabled else None,
    redoc_url="/redoc" if settings.openapi_enabled else None,
    openapi_url="/openapi.json" if settings.openapi_enabled else None,
)

setup_tracing(app)

app.add_middleware(TimeoutMiddleware, timeout_seconds=settings.REQUEST_TIMEOUT_SECONDS)
app.add_middleware(LoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(admin.router, prefix=settings.API_PREFIX)
app.include_router(vendors.router, prefix=settings.API_PREFIX)
app.include_router(families.router, prefix=settings.API_PREFIX)
app.include_router(products.router, prefix=settings.API_PREFIX)
app.include_router(versions.router, prefix=settings.API_PREFIX)
app.include_router(relationships.router, prefix=settings.API_PREFIX)
app.include_router(helpers.router, prefix=settings.API_PREFIX)
app.include_router(admin.metrics_router)


@app.exception_handler(ApplicationError)
async def handle_application_error(_: Request, exc: ApplicationError):
    """Return standardized responses for application layer exceptions."""

    observe_error(exc.code)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    """Report malformed requests as bad input instead of FastAPI's default 422."""

    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))

    logger.info("request.invalid", extra={"path": request.url.path, "problems": problems})
    return await handle_application_error(request, BadInputError("; ".join(problems) or "Invalid request"))
