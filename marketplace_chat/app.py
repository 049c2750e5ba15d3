"""
FastAPI Application Factory.
Creates and configures the FastAPI application with all routers, middleware, and DI.

The production instance lives in marketplace_chat/main.py; tests call
create_app() with a container built from in-memory fakes.
"""

import logging
from contextlib import asynccontextmanager

from dishka import AsyncContainer
from dishka.integrations.fastapi import setup_dishka
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from marketplace_chat.config.logging_config import NO_CORRELATION_ID, correlation_id_var
from marketplace_chat.config.settings import Config
from marketplace_chat.presentation.api import (
    attachments_router,
    conversations_router,
    interests_router,
    listings_router,
    messages_router,
    metrics_router,
    notifications_router,
    presence_router,
    realtime_router,
)
from marketplace_chat.presentation.api.errors import DOMAIN_ERRORS, status_for
logger = logging.getLogger(__name__)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Middleware to extract and set correlation ID from request headers."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-ID", NO_CORRELATION_ID)

        # Set in contextvars (propagates to async tasks and logging)
        correlation_id_var.set(correlation_id)

        response = await call_next(request)
        response.headers["X-Correlation-ID"] = correlation_id
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    - Startup: APP-scoped clients connect lazily on first use
    - Shutdown: close the DI container (disconnects Prisma, Redis, change feed)
    """
    logger.info(f"{Config.APP_NAME} started. DI container initialized.")
    yield
    await app.state.dishka_container.close()
    logger.info(f"{Config.APP_NAME} shutdown. DI container closed.")


def create_app(container: AsyncContainer) -> FastAPI:
    """
    Application factory for creating FastAPI app.

    Args:
        container: DI container providing every handler and port the routers use
    """
    app = FastAPI(
        title="Marketplace Chat API",
        description="Listing conversations, attachments and notifications",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Setup Dishka BEFORE app starts (must add middleware before startup)
    setup_dishka(container, app)

    app.add_middleware(CorrelationIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        logger.info(f"[VALIDATION ERROR] {errors}")
        return JSONResponse(
            status_code=400,
            content={"error": "Validation error", "details": errors},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code >= 500:
            logger.error(f"[HTTP ERROR {exc.status_code}] {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    # Domain errors that escaped a router's own mapping
    for error_type in DOMAIN_ERRORS:

        @app.exception_handler(error_type)
        async def domain_exception_handler(request: Request, exc: Exception):
            return JSONResponse(status_code=status_for(exc), content={"error": str(exc)})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"[GLOBAL ERROR] {type(exc).__name__}: {exc}")
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
        )

    @app.get("/health", tags=["health"])
    async def health():
        return {"status": "healthy"}

    app.include_router(conversations_router)
    app.include_router(messages_router)  # GET /messages/unread-count
    app.include_router(attachments_router)
    app.include_router(notifications_router)
    app.include_router(listings_router)  # POST /listings/{id}/interests
    app.include_router(interests_router)  # POST /interests/{id}/decision
    app.include_router(presence_router)
    app.include_router(realtime_router)  # WS /ws/...
    app.include_router(metrics_router)

    return app

