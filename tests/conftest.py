from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from wxcc_overrides import models  # noqa: F401
from wxcc_overrides.database import Base
from wxcc_overrides.domain.overrides.schemas import WxccOverride, WxccOverrideContainer
from wxcc_overrides.domain.overrides.service import OverrideService
from wxcc_overrides.rate_limiter import reset_rate_limits
from wxcc_overrides.services.mock_wxcc import InMemoryWxccApiClient

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


def make_override(name, engaged, start, end):
    return WxccOverride(name=name, workingHours=engaged, startDateTime=start, endDateTime=end)


def make_container(container_id="c-1", overrides=None, **fields):
    fields.setdefault("name", f"Container {container_id}")
    fields.setdefault("organizationId", "org-1")
    fields.setdefault("version", 3)
    fields.setdefault("timezone", "America/New_York")
    fields.setdefault("createdTime", "2025-01-01T08:00")
    fields.setdefault("lastModifiedTime", "2025-01-10T08:00")
    return WxccOverrideContainer(id=container_id, overrides=overrides or [], **fields)


@pytest.fixture(autouse=True)
def clear_rate_limits():
    reset_rate_limits()
    yield
    reset_rate_limits()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def sales_container():
    return make_container(
        "c-1",
        [
            make_override("agent-a", True, "2025-01-15T09:00", "2025-01-15T17:00"),
            make_override("agent-b", True, "2025-01-15T18:00", "2025-01-15T20:00"),
            make_override("agent-c", False, "2025-01-15T10:00", "2025-01-15T11:00"),
        ],
        name="Sales Team Override",
    )


@pytest.fixture
def wxcc(sales_container):
    return InMemoryWxccApiClient([sales_container])


@pytest.fixture
def override_service(wxcc):
    return OverrideService(wxcc, clock=lambda: NOW)


@pytest.fixture
def test_engine():
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
def db_session(test_engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
