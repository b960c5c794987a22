"""
ChurrasApp - FastAPI Backend
Main application entry point

Run with `python main.py`, which drains in-flight requests for at most
SHUTDOWN_TIMEOUT seconds before the lifespan shutdown closes the database.
When starting uvicorn from the command line pass the same bound, e.g.
`uvicorn main:app --timeout-graceful-shutdown 10 --no-server-header`;
without it uvicorn waits for open requests indefinitely.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from churrasapp.core.config import Settings, settings as default_settings
from churrasapp.core.db import DatabaseManager, shutdown
from churrasapp.core.logging import setup_logging
from churrasapp.api import routes_events, routes_health, routes_web
from churrasapp.api.error_handlers import register_error_handlers
from churrasapp.utils.security import add_security_headers

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, db_manager: Optional[DatabaseManager] = None) -> FastAPI:
    """Build the application. A ready DatabaseManager can be injected (tests)."""
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan management"""
        setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
        manager = db_manager or DatabaseManager(
            settings.DATABASE_URL,
            max_retries=settings.DB_MAX_RETRIES,
            retry_delay=settings.DB_RETRY_DELAY,
            pool_size=settings.DB_POOL_SIZE,
            connect_timeout=settings.DB_CONNECT_TIMEOUT,
        )
        manager.connect()
        manager.create_all()
        logger.info("Database tables created")
        app.state.db = manager
        app.state.started_at = time.monotonic()
        logger.info("%s %s started (%s)", settings.SERVICE_NAME, settings.VERSION, settings.ENVIRONMENT)
        yield
        shutdown(manager, settings.SHUTDOWN_TIMEOUT)
        logger.info("Application shutdown")

    app = FastAPI(
        title=settings.SERVICE_NAME,
        description="Barbecue planning: events, guests and shopping lists",
        version=settings.VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    add_security_headers(app)
    register_error_handlers(app)

    app.include_router(routes_health.router, tags=["health"])
    app.include_router(routes_events.router, prefix="/api/events", tags=["events"])
    app.include_router(routes_web.router, tags=["web"])
    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        timeout_graceful_shutdown=int(default_settings.SHUTDOWN_TIMEOUT),
        server_header=False,
    )
