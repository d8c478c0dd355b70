import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from datetime import datetime, timedelta, timezone  # noqa: E402
from typing import List, Optional  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from bracketeer.database import build_engine, get_session, init_db  # noqa: E402
from bracketeer.main import app  # noqa: E402
from bracketeer.models.event import Event, EventStatus  # noqa: E402
from bracketeer.models.registration import EventRegistration  # noqa: E402

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. sqlite:///:memory: with StaticPool so ALL sessions share the same DB
# 2. build_engine sets check_same_thread=False for TestClient/threaded access
# 3. init_db() registers the models before create_all()
# 4. App dependency overridden to use test_engine (see client_fixture)
# 5. Tables dropped after each test so every test starts empty
test_engine = build_engine(TEST_DATABASE_URL, poolclass=StaticPool)

BASE_TIME = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def override_get_session():
    """Override session to use test engine"""
    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on a fresh schema"""
    init_db(test_engine)

    with Session(test_engine) as session:
        yield session

    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client with overridden database session

    Override MUST be set BEFORE TestClient() and stay in place for the entire
    duration so the app never uses its own engine.
    """
    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_event(session: Session):
    """Factory: create an event (registration_open by default) with optional registrations."""

    def _make(
        user_ids: Optional[List[str]] = None,
        status: str = EventStatus.registration_open.value,
        min_participants: int = 2,
        max_participants: Optional[int] = None,
    ) -> Event:
        event = Event(
            title="Forklift Safety Showdown",
            status=status,
            min_participants=min_participants,
            max_participants=max_participants,
        )
        session.add(event)
        session.commit()
        session.refresh(event)

        for i, user_id in enumerate(user_ids or []):
            session.add(
                EventRegistration(
                    event_id=event.id,
                    user_id=user_id,
                    registered_at=BASE_TIME + timedelta(minutes=i),
                )
            )
        session.commit()
        session.refresh(event)
        return event

    return _make
