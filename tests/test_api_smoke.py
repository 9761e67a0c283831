"""Smoke tests ensuring the API app imports and serves exchange clock status."""

from fastapi.testclient import TestClient

from market_clock.services.api.main import app

client = TestClient(app)


def test_health_endpoint() -> None:
    """Health endpoint should report an OK status."""

    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_status_at_explicit_instant() -> None:
    response = client.get("/status", params={"at": "2024-07-01T10:00:00+09:00", "ids": "krx,tse"})

    assert response.status_code == 200
    body = response.json()
    assert body["at"] == "2024-07-01T10:00:00+09:00"
    assert [item["exchange_id"] for item in body["statuses"]] == ["krx", "tse"]
    assert body["statuses"][0]["phase"] == "open"
    assert body["statuses"][0]["minutes_to_next"] == 330


def test_status_accepts_utc_instants() -> None:
    response = client.get("/status/nyse", params={"at": "2024-07-01T13:30:00Z"})

    assert response.status_code == 200
    body = response.json()
    assert body["local_time"] == "09:30:00"
    assert body["is_dst"] is True
    assert body["next_event"] == "close"


def test_unknown_exchange_is_not_found() -> None:
    assert client.get("/status/nope").status_code == 404


def test_unknown_selection_reports_data_unavailable() -> None:
    response = client.get("/status", params={"ids": "nope"})

    assert response.status_code == 503
    assert response.json()["detail"]["exchange_id"] == "nope"


def test_malformed_instant_is_rejected() -> None:
    assert client.get("/status", params={"at": "yesterday"}).status_code == 422


def test_timeline_groups_regions() -> None:
    response = client.get("/timeline", params={"at": "2024-07-01T12:00:00+09:00", "ids": "nyse,sse,lse"})

    assert response.status_code == 200
    regions = response.json()["regions"]
    assert [group["region"] for group in regions] == ["asia", "europe", "americas"]
    nyse = regions[2]["exchanges"][0]
    assert nyse["kst_window"]["kst_open"] == "22:30"
    assert nyse["kst_window"]["crosses_midnight"] is True
    assert nyse["dst_period"] == "second Sunday of March to first Sunday of November"


def test_exchanges_lists_definitions() -> None:
    response = client.get("/exchanges", params={"ids": "tse"})

    assert response.status_code == 200
    assert response.json()[0]["lunch_break"] == {"start": "11:30", "end": "12:30"}
