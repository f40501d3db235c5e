"""PropertyHub API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map PropertyHubError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database manager and notification emitter created in the lifespan and
      stored on app.state; disposed on shutdown

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Request logging is middleware so handled and unhandled errors both land
      in api_logs with their final status
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from propertyhub.api.error_handlers import register_error_handlers
from propertyhub.api.routes import admin_users, auth, catalog, health, properties
from propertyhub.config import ensure_signing_secrets, get_settings
from propertyhub.infrastructure.database import DatabaseSessionManager
from propertyhub.infrastructure.notifications import LoggingNotificationEmitter
from propertyhub.infrastructure.observability import setup_logging
from propertyhub.infrastructure.request_log import RequestLogMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    ensure_signing_secrets(settings)
    app.state.settings = settings
    app.state.db = DatabaseSessionManager(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    app.state.emitter = LoggingNotificationEmitter()
    logger.info(f"PropertyHub API started ({settings.environment})")
    yield
    logger.info("PropertyHub API shutting down")
    await app.state.db.dispose()


app = FastAPI(
    title="PropertyHub API", version="1.0.0", lifespan=lifespan,
)

# CORS origins from settings
settings = get_settings()
app.add_middleware(RequestLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Routes
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(admin_users.router)
app.include_router(properties.router)
app.include_router(catalog.router)
