from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from menucal.core.config import get_settings
from menucal.main import create_app
from tests.fakes import FakeEventStore, make_event


@pytest.fixture
def sample_events():
    """
    A handful of March 2024 events (UTC), deliberately out of order.
    """
    return [
        make_event(
            "standup",
            datetime(2024, 3, 4, 9, 30, tzinfo=timezone.utc),
            datetime(2024, 3, 4, 9, 45, tzinfo=timezone.utc),
            notes="Join: https://zoom.us/j/12345 details",
        ),
        make_event(
            "early",
            datetime(2024, 3, 4, 8, 0, tzinfo=timezone.utc),
            datetime(2024, 3, 4, 8, 30, tzinfo=timezone.utc),
        ),
        make_event(
            "review",
            datetime(2024, 3, 20, 15, 0, tzinfo=timezone.utc),
            datetime(2024, 3, 20, 16, 0, tzinfo=timezone.utc),
            location="https://teams.microsoft.com/l/meetup-join/abc",
        ),
        make_event(
            "april-lead",
            datetime(2024, 4, 2, 10, 0, tzinfo=timezone.utc),
        ),
    ]


@pytest.fixture
def event_store(sample_events) -> FakeEventStore:
    return FakeEventStore(events=sample_events, granted=True)


@pytest.fixture
def client(event_store) -> TestClient:
    """
    TestClient over a fresh app wired to the fake event store.

    Uses the application factory so each test gets its own calendar state.
    """
    get_settings.cache_clear()
    app = create_app(store=event_store)
    with TestClient(app) as test_client:
        yield test_client
    get_settings.cache_clear()
