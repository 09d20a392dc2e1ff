"""Pytest configuration and fixtures."""

import os
import threading

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("HARDWARE_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from potting_api.api.deps import get_coordinator
from potting_api.database import Base, get_db
from potting_api.main import app
from potting_api.services.coordinator import BatchCoordinator
from potting_api.services.hardware_notifier import BaseHardwareNotifier, NotificationResult


class RecordingNotifier(BaseHardwareNotifier):
    """Notifier that records commands instead of calling the controller."""

    def __init__(self, success: bool = True):
        self.success = success
        self.calls = []

    def notify_start(self, batch_id: int) -> NotificationResult:
        self.calls.append(("start", batch_id))
        return NotificationResult(command="start-batch", success=self.success)

    def notify_stop(self) -> NotificationResult:
        self.calls.append(("stop", None))
        return NotificationResult(command="stop-batch", success=self.success)


@pytest.fixture
def test_engine():
    """Create test database engine."""
    # Use in-memory SQLite for tests
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def test_db(test_engine):
    """Create a test database session."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def coordinator(notifier):
    return BatchCoordinator(notifier=notifier, lock=threading.RLock())


@pytest.fixture
def client():
    """Create a test client."""
    return TestClient(app)


@pytest.fixture
def client_with_db(test_db, coordinator):
    """Create a test client with database session and coordinator overrides."""

    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_coordinator] = lambda: coordinator
    yield TestClient(app)
    app.dependency_overrides.clear()
