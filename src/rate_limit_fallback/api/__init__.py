"""
FastAPI API routes and endpoints.

- routes.py: POST /events, GET /sessions/{id}/state, GET /health
- dependencies.py: Singletons for settings, host client and event dispatcher
- models.py: API-specific request/response models
- error_handlers.py: Exception handlers for structured error responses
- middleware.py: Request tracing
"""

from rate_limit_fallback.api import dependencies, error_handlers, models
from rate_limit_fallback.api.routes import router

__all__ = [
    "router",
    "dependencies",
    "error_handlers",
    "models",
]
