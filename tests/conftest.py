"""
Shared fixtures: a file-backed SQLite database per test and an app client bound to it
"""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

import churrasapp.models  # noqa: F401 - registers the tables
from churrasapp.core.db import DatabaseManager
from churrasapp.schemas.fields import utcnow
from churrasapp.services.event_service import EventService
from main import create_app


def _no_sleep(seconds):
    pass


@pytest.fixture
def db_manager(tmp_path):
    """Connected manager over a fresh SQLite file"""
    manager = DatabaseManager(f"sqlite:///{tmp_path / 'churrasapp_test.db'}", sleep=_no_sleep)
    manager.connect()
    manager.create_all()
    yield manager
    manager.disconnect()


@pytest.fixture
def db_session(db_manager):
    """Create test database session"""
    with db_manager.session() as db:
        yield db


@pytest.fixture
def client(db_manager):
    """TestClient running the full app (middleware, handlers, lifespan)"""
    app = create_app(db_manager=db_manager)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def future_date():
    """ISO string for a date ``days`` ahead"""
    def _future(days=30):
        return (utcnow() + timedelta(days=days)).replace(microsecond=0).isoformat()
    return _future


@pytest.fixture
def event_payload(future_date):
    """Valid event creation body in wire format"""
    return {
        "name": "Churrasco da Firma",
        "date": future_date(30),
        "location": "Chácara do João",
        "estimatedParticipants": 10,
    }


@pytest.fixture
def sample_event(db_session, event_payload):
    """A persisted draft event"""
    return EventService.create_event(db_session, event_payload)
