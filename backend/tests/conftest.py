# tests/conftest.py

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.clock import get_clock
from app.db.base import Base, build_engine, get_db
from app.main import app
from app.services import tasks as task_service


class FixedClock:
    """Clock frozen at a given instant; ``advance`` moves it forward."""

    def __init__(self, current: datetime) -> None:
        self.current = current

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


@pytest.fixture()
def engine():
    """Fresh in-memory database per test, with foreign keys enforced."""
    test_engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture()
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(datetime(2025, 1, 10, 12, 0))


@pytest.fixture()
def make_task(db, clock):
    """Create a task through the service with sensible defaults."""

    def _make(**fields):
        fields.setdefault("title", "Task")
        user_id = fields.pop("user_id", 1)
        return task_service.create_task(db, fields, clock=clock, user_id=user_id)

    return _make


@pytest.fixture()
def client(engine, clock):
    """TestClient wired to the in-memory database and the fixed clock."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()
