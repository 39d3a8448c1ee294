"""
FastAPI application entry point for the rate-limit fallback service.
"""

import structlog
from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

from rate_limit_fallback.api.dependencies import (
    get_event_dispatcher,
    get_fallback_config,
    get_session_client,
)
from rate_limit_fallback.api.error_handlers import EXCEPTION_HANDLERS
from rate_limit_fallback.api.middleware import RequestTracingMiddleware
from rate_limit_fallback.api.routes import router
from rate_limit_fallback.config import settings
from rate_limit_fallback.logging_config import configure_logging

# Configure structured logging before any other imports
configure_logging(settings.LOG_LEVEL, settings.ENVIRONMENT)
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Rate Limit Fallback",
    description="Resubmits rate-limited AI session requests on fallback models",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Request tracing middleware (must be first for request_id in all logs)
app.add_middleware(RequestTracingMiddleware)

for exc_class, handler in EXCEPTION_HANDLERS.items():
    app.add_exception_handler(exc_class, handler)

app.include_router(router, tags=["fallback"])


@app.on_event("startup")
async def startup():
    """Application startup - load config and build the dispatcher."""
    config = get_fallback_config()
    logger.info(
        "Application startup",
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        host_base_url=settings.HOST_BASE_URL,
        plugin_enabled=config.enabled,
    )

    # Build the dispatcher eagerly so the event log records initialization
    get_event_dispatcher()

    if await get_session_client().health_check():
        logger.info("Host connection successful")
    else:
        logger.warning("Host unreachable at startup", host_base_url=settings.HOST_BASE_URL)

    logger.info("Application startup complete")


@app.on_event("shutdown")
async def shutdown():
    """Application shutdown - close host connections."""
    logger.info("Application shutdown")
    await get_session_client().close()
    logger.info("Application shutdown complete")


if settings.PROMETHEUS_ENABLED:
    Instrumentator().instrument(app).expose(app)


@app.get("/")
async def root():
    """Root endpoint with API documentation links."""
    return {
        "service": "Rate Limit Fallback",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/health",
        "events": "/events",
        "metrics": "/metrics" if settings.PROMETHEUS_ENABLED else None,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rate_limit_fallback.main:app",
        host="127.0.0.1",
        port=8000,
        reload=settings.DEBUG,
    )
