import os

# Must be set before the app (and its settings) are imported
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("SESSION_SECRET", "test-session-secret")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from feedback360.main import app
from feedback360.db.base import Base
from feedback360.db.session import get_db
from feedback360.core.config import settings
from feedback360.core.notifications import get_mailer
from feedback360.core.rate_limit import LoginAttemptTracker, get_manager_login_tracker
from tests.helpers import FakeClock, RecordingMailer

if settings.DATABASE_URL.startswith("sqlite"):
    # One shared in-memory database for the whole run
    engine = create_engine(
        settings.DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True)

TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db_session():
    """
    Fresh schema per test. Application code commits freely; the tables are
    dropped afterwards so nothing leaks between tests.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def mailer():
    return RecordingMailer()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def login_tracker(clock):
    return LoginAttemptTracker(max_attempts=5, lockout_seconds=15 * 60, clock=clock)


@pytest.fixture(autouse=True)
def override_dependencies(db_session, mailer, login_tracker):
    def _get_db_override():
        yield db_session

    app.dependency_overrides[get_db] = _get_db_override
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_manager_login_tracker] = lambda: login_tracker
    yield
    app.dependency_overrides.clear()
