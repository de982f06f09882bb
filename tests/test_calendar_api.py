from http import HTTPStatus
from zoneinfo import ZoneInfo

from fastapi.testclient import TestClient

from menucal.core.config import get_settings
from menucal.main import create_app
from tests.fakes import FakeEventStore


def _load_march(client):
    response = client.post("/calendar/refresh?month=2024-03-01")
    assert response.status_code == HTTPStatus.OK
    return response.json()


def test_access_is_granted_on_startup(client, event_store):
    response = client.get("/calendar/access")

    assert response.status_code == HTTPStatus.OK
    assert response.json() == {"state": "GRANTED"}
    assert event_store.access_calls == 1
    # Startup loads the displayed (current) month once
    assert len(event_store.fetch_calls) == 1


def test_refresh_returns_cache_status(client):
    data = _load_march(client)

    assert data["month"] == "2024-03-01"
    assert data["is_loading"] is False
    assert data["error"] is None
    assert data["day_count"] == 3
    assert data["event_count"] == 4
    assert data["access"] == "GRANTED"

    status_resp = client.get("/calendar/status")
    assert status_resp.json() == data


def test_grid_marks_days_with_events(client):
    _load_march(client)

    response = client.get("/calendar/grid?month=2024-03-10")
    assert response.status_code == HTTPStatus.OK
    data = response.json()

    assert data["month"] == "2024-03-01"
    assert data["weekdays"][0] == "Sun"
    days = data["days"]
    assert len(days) == 42
    assert days[0]["day"] == "2024-02-25"
    assert days[0]["day_path"] == "2024/02/25"
    assert days[0]["is_in_displayed_month"] is False

    by_day = {cell["day"]: cell for cell in days}
    assert by_day["2024-03-04"]["event_count"] == 2
    assert by_day["2024-03-04"]["has_events"] is True
    assert by_day["2024-03-05"]["has_events"] is False
    assert by_day["2024-04-02"]["has_events"] is True
    assert by_day["2024-04-02"]["is_in_displayed_month"] is False


def test_day_events_include_meeting_links(client):
    _load_march(client)

    response = client.get("/calendar/days/2024-03-04/events")
    assert response.status_code == HTTPStatus.OK
    items = response.json()

    assert [item["event"]["identifier"] for item in items] == ["early", "standup"]
    assert items[0]["time_label"] == "8:00 AM - 8:30 AM"
    assert items[0]["meeting_link"] is None
    assert items[1]["meeting_link"] == {"url": "https://zoom.us/j/12345", "provider": "Zoom"}

    review = client.get("/calendar/days/2024-03-20/events").json()
    assert review[0]["time_label"] == "3:00 PM - 4:00 PM"
    assert review[0]["meeting_link"]["provider"] == "Teams"


def test_day_without_cached_events_is_empty(client):
    response = client.get("/calendar/days/2030-01-01/events")

    assert response.status_code == HTTPStatus.OK
    assert response.json() == []


def test_navigation_flow(client, event_store):
    state = client.post("/calendar/select?day=2024-03-15").json()
    assert state["displayed_month"] == "2024-03-01"
    assert state["selected_day"] == "2024-03-15"
    assert state["title"] == "March 2024"

    state = client.post("/calendar/navigation/next").json()
    assert state["displayed_month"] == "2024-04-01"
    assert state["selected_day"] == "2024-04-01"

    state = client.post("/calendar/navigation/previous").json()
    assert state["displayed_month"] == "2024-03-01"
    assert state["selected_day"] == "2024-03-01"

    assert client.get("/calendar/navigation").json() == state
    # startup + select (month change) + next + previous
    assert len(event_store.fetch_calls) == 4


def test_navigation_rejects_unknown_action(client):
    response = client.post("/calendar/navigation/sideways")

    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY


def test_denied_access_blocks_fetching():
    get_settings.cache_clear()
    store = FakeEventStore(granted=False)
    app = create_app(store=store)

    with TestClient(app) as client:
        assert client.get("/calendar/access").json() == {"state": "DENIED"}

        data = client.post("/calendar/refresh?month=2024-03-01").json()
        assert data["month"] is None
        assert data["is_loading"] is False
        assert data["access"] == "DENIED"
        assert store.fetch_calls == []

        # User grants access in system settings, then the client re-requests
        store.granted = True
        assert client.post("/calendar/access").json() == {"state": "GRANTED"}
        assert len(store.fetch_calls) == 1


def test_revoked_access_keeps_last_known_events(client, event_store):
    before = _load_march(client)
    march_4 = client.get("/calendar/days/2024-03-04/events").json()
    fetches_before = len(event_store.fetch_calls)

    event_store.granted = False
    assert client.post("/calendar/access").json() == {"state": "DENIED"}

    status = client.get("/calendar/status").json()
    assert status["event_count"] == before["event_count"]
    assert status["access"] == "DENIED"
    assert client.get("/calendar/days/2024-03-04/events").json() == march_4

    refreshed = client.post("/calendar/refresh?month=2024-04-01").json()
    assert refreshed["month"] == "2024-03-01"
    assert len(event_store.fetch_calls) == fetches_before


def test_unknown_timezone_falls_back_to_utc(monkeypatch):
    monkeypatch.setenv("TIMEZONE", "Mars/Olympus_Mons")
    get_settings.cache_clear()
    app = create_app(store=FakeEventStore())

    try:
        assert app.state.calendar.tz == ZoneInfo("UTC")
        with TestClient(app) as client:
            assert client.get("/calendar/access").json() == {"state": "GRANTED"}
    finally:
        get_settings.cache_clear()
