"""
Database connection manager - pooled SQLAlchemy engine with bounded
retry on connect, connection state tracking and deadline-bound shutdown.

The manager is constructed by the application lifespan and stored on
``app.state.db``; nothing connects at import time.
"""

import logging
import os
import threading
import time
from contextlib import contextmanager
from enum import Enum
from typing import Any, Callable, Dict, Generator, Optional

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from churrasapp.core.errors import DatabaseConnectionError

logger = logging.getLogger(__name__)

Base = declarative_base()


class ConnectionState(int, Enum):
    DISCONNECTED = 0
    CONNECTED = 1
    CONNECTING = 2
    DISCONNECTING = 3

    @property
    def label(self) -> str:
        return self.name.lower()


class DatabaseManager:
    """Owns the engine, the session factory and the connection state."""

    def __init__(
        self,
        database_url: str,
        max_retries: int = 5,
        retry_delay: float = 5.0,
        pool_size: int = 10,
        connect_timeout: int = 5,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.url = make_url(database_url)
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.pool_size = pool_size
        self.connect_timeout = connect_timeout
        self.current_retries = 0
        self.state = ConnectionState.DISCONNECTED
        self.engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None
        self._sleep = sleep

    def _create_engine(self) -> Engine:
        if self.url.get_backend_name() == "sqlite":
            options: Dict[str, Any] = {
                "connect_args": {"check_same_thread": False, "timeout": self.connect_timeout},
            }
            if self.url.database in (None, "", ":memory:"):
                options["poolclass"] = StaticPool
        else:
            options = {
                "pool_size": self.pool_size,
                "pool_pre_ping": True,
                "pool_recycle": 3600,
                "pool_timeout": 45,
                "connect_args": {"connect_timeout": self.connect_timeout},
            }
        engine = create_engine(self.url, **options)
        event.listen(engine, "handle_error", self._on_error)
        event.listen(engine, "connect", self._on_connect)
        return engine

    def connect(self) -> Engine:
        """Open the pool and verify it, retrying with exponential backoff.

        Delays are ``retry_delay * 2 ** (attempt - 1)``; after
        ``max_retries`` failed retries a DatabaseConnectionError is raised.
        """
        if self.engine is not None and self.state == ConnectionState.CONNECTED:
            return self.engine

        engine = self.engine or self._create_engine()
        self.engine = engine
        self.current_retries = 0

        while True:
            self.state = ConnectionState.CONNECTING
            logger.info("Connecting to database %s", self.url.render_as_string(hide_password=True))
            try:
                with engine.connect() as conn:
                    conn.execute(text("SELECT 1"))
            except SQLAlchemyError as e:
                self.state = ConnectionState.DISCONNECTED
                logger.error("Database connection failed: %s", e)
                if self.current_retries >= self.max_retries:
                    engine.dispose()
                    self.engine = None
                    raise DatabaseConnectionError(
                        f"Failed to connect to the database after {self.max_retries} retries: {e}"
                    ) from e
                self.current_retries += 1
                delay = self.retry_delay * 2 ** (self.current_retries - 1)
                logger.warning(
                    "Retrying database connection (%d/%d) in %.1fs",
                    self.current_retries, self.max_retries, delay,
                    extra={"attempt": self.current_retries},
                )
                self._sleep(delay)
                continue
            break

        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)
        self.state = ConnectionState.CONNECTED
        self.current_retries = 0
        info = self.get_connection_info()["details"]
        logger.info("Database connected: %s (host=%s port=%s)", info["name"], info["host"], info["port"])
        return engine

    def _on_error(self, context) -> None:
        if context.is_disconnect and self.state == ConnectionState.CONNECTED:
            logger.warning("Database connection lost")
            self.state = ConnectionState.DISCONNECTED

    def _on_connect(self, dbapi_connection, connection_record) -> None:
        if self.state == ConnectionState.DISCONNECTED and self._session_factory is not None:
            logger.info("Database reconnected")
            self.state = ConnectionState.CONNECTED

    def create_all(self) -> None:
        """Create tables for every model registered on Base"""
        if self.engine is None:
            raise RuntimeError("Database not connected")
        Base.metadata.create_all(bind=self.engine)

    def is_ready(self) -> bool:
        return self.engine is not None and self.state == ConnectionState.CONNECTED

    def health_check(self) -> bool:
        """Ping the database (readiness probes). Never raises."""
        if self.engine is None:
            return False
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error("Database health check failed: %s", e)
            return False

    def get_connection_info(self) -> Dict[str, Any]:
        if self.engine is None:
            return {"status": "disconnected", "details": None}
        return {
            "status": "connected" if self.state == ConnectionState.CONNECTED else "disconnected",
            "details": {
                "host": self.url.host,
                "port": self.url.port,
                "name": self.url.database,
                "ready_state": int(self.state),
                "ready_state_text": self.state.label,
            },
        }

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Provide a session that rolls back on any exception"""
        if self._session_factory is None:
            raise RuntimeError("Database not connected")
        db = self._session_factory()
        try:
            yield db
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def disconnect(self) -> None:
        """Close the pool. Safe to call more than once."""
        if self.engine is None:
            return
        self.state = ConnectionState.DISCONNECTING
        self.engine.dispose()
        self.engine = None
        self._session_factory = None
        self.state = ConnectionState.DISCONNECTED
        logger.info("Database disconnected")


def _force_exit() -> None:
    logger.error("Shutdown deadline exceeded, forcing exit")
    os._exit(1)


def shutdown(manager: DatabaseManager, timeout: float) -> None:
    """Disconnect under a hard deadline; the process exits if it is missed."""
    timer = threading.Timer(timeout, _force_exit)
    timer.daemon = True
    timer.start()
    try:
        manager.disconnect()
    finally:
        timer.cancel()


def get_db(request: Request) -> Generator[Session, None, None]:
    """FastAPI dependency for database sessions"""
    with request.app.state.db.session() as db:
        yield db
