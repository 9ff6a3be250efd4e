from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from studydesk.config import Settings
from studydesk.database.models import Base, User
from studydesk.database.store import SqlDocumentStore
from studydesk.database.database import make_session_factory
from studydesk.services.event_bus import AlertCenter, EventBus
from studydesk.services.retry_gateway import RetryWriteGateway
from studydesk.services.schedule_status import RecurringEvent

# 2024-01-01 was a Monday
MONDAY = datetime(2024, 1, 1)


class RecordingSleep:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def make_event(event_id, start, end, days=("Monday",), subject="Math", location=None):
    return RecurringEvent(
        id=event_id,
        days=frozenset(days),
        start_time=start,
        end_time=end,
        subject=subject,
        location=location,
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def user_id(session_factory):
    db = session_factory()
    try:
        user = User(name="Student", email="student@example.com", settings={})
        db.add(user)
        db.commit()
        return user.id
    finally:
        db.close()


@pytest.fixture
def store(session_factory):
    return SqlDocumentStore(session_factory)


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def bus():
    bus = EventBus()
    yield bus
    bus.close()


@pytest.fixture
def alerts(bus):
    return AlertCenter(bus)


@pytest.fixture
def gateway(alerts, sleep):
    return RetryWriteGateway(max_retries=3, base_delay_ms=1000, alerts=alerts, sleep=sleep)


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://", timezone="UTC", retry_base_delay_ms=10)
