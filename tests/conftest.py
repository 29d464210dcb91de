# tests/conftest.py
"""Shared fixtures: in-memory database, users, vehicles, recording notifier, API client."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Set env before importing app components
os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["EMAIL_HOST"] = ""
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from datetime import date
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from requisition.config import Settings
from requisition.database import create_session_factory, create_tables, get_db
from requisition.dependencies import get_notifier, get_settings
from requisition.main import app
from requisition.models.user import User, UserRole
from requisition.models.vehicle import Vehicle
from requisition.services import auth_service
from requisition.services.request_service import RequestService

# Cheap hashes keep the suite fast
auth_service.BCRYPT_ROUNDS = 4


class RecordingNotifier:
    """Stands in for the SMTP notifier and remembers what would have been sent."""

    def __init__(self):
        self.new_requests = []
        self.status_changes = []

    def notify_new_request(self, data):
        self.new_requests.append(data)

    def notify_status_change(self, data, status, vehicle=None):
        self.status_changes.append((data, status, vehicle))


@pytest.fixture
def test_settings():
    return Settings(
        ENVIRONMENT="testing",
        DATABASE_URL="sqlite:///:memory:",
        JWT_SECRET_KEY="test-secret",
        EMAIL_HOST=None,
        ADMIN_EMAIL="fleet-admin@example.com",
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session = create_session_factory(engine)()
    yield session
    session.close()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def service(db_session, notifier, test_settings):
    return RequestService(db_session, notifier, test_settings)


def _make_user(db, name, email, role):
    user = User(name=name, email=email, role=role.value,
                password_hash=auth_service.hash_password("password123"))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def employee(db_session):
    return _make_user(db_session, "Emma Employee", "emma@example.com", UserRole.EMPLOYEE)


@pytest.fixture
def other_employee(db_session):
    return _make_user(db_session, "Omar Other", "omar@example.com", UserRole.EMPLOYEE)


@pytest.fixture
def admin(db_session):
    return _make_user(db_session, "Ada Admin", "ada@example.com", UserRole.ADMIN)


def _make_vehicle(db, number, available=True):
    vehicle = Vehicle(vehicle_number=number, make_model="Toyota Hiace",
                      driver_name="Dan Driver", is_available=available)
    db.add(vehicle)
    db.commit()
    db.refresh(vehicle)
    return vehicle


@pytest.fixture
def vehicle(db_session):
    return _make_vehicle(db_session, "KA-01-1234")


@pytest.fixture
def second_vehicle(db_session):
    return _make_vehicle(db_session, "KA-01-5678")


@pytest.fixture
def unavailable_vehicle(db_session):
    return _make_vehicle(db_session, "KA-09-0000", available=False)


@pytest.fixture
def journey():
    return {
        "officer_name": "A. Officer",
        "designation": "Engineer",
        "required_date": date(2025, 6, 1),
        "required_time": "09:00",
        "report_place": "Head Office",
        "places_to_visit": "Site A, Site B",
        "journey_purpose": "Inspection",
        "release_time": "17:00",
    }


@pytest.fixture
def journey_json(journey):
    return {**journey, "required_date": journey["required_date"].isoformat()}


@pytest.fixture
def auth_headers(test_settings):
    def _headers(user):
        token = auth_service.create_access_token(user, test_settings)
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def client(db_session, notifier, test_settings):
    """TestClient bound to the test session, notifier and settings."""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_settings] = lambda: test_settings
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
