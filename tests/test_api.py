import pytest

pytest.importorskip("fastapi")

from fastapi.testclient import TestClient

from api.app import app
from api.deps import get_location_book, get_result_cache


client = TestClient(app)


def test_health_reports_engine():
    r = client.get("/__health")
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert body["engine"].startswith("swisseph")


def test_validate_reports_both_errors():
    r = client.post("/v1/location/validate", json={"latitude": 95, "longitude": -200})
    assert r.status_code == 200
    assert r.json()["valid"] is False
    assert len(r.json()["errors"]) == 2


def test_invalid_place_maps_to_422():
    r = client.post(
        "/v1/islamic/prayer-times",
        json={"date": "2024-06-14", "place": {"latitude": 95, "longitude": -200}},
    )
    assert r.status_code == 422
    assert r.json() == {
        "valid": False,
        "errors": [
            "Latitude must be between -90 and 90 degrees",
            "Longitude must be between -180 and 180 degrees",
        ],
    }


def test_timezone_lookup():
    r = client.post(
        "/v1/location/timezone?at=2024-07-01T12:00:00Z",
        json={"latitude": 40.7128, "longitude": -74.0060},
    )
    assert r.status_code == 200
    assert r.json()["timezone"] == "America/New_York"
    assert r.json()["offset_minutes"] == -240


def test_qibla():
    r = client.get("/v1/location/qibla", params={"latitude": 40.7128, "longitude": -74.0060})
    assert r.status_code == 200
    assert r.json()["qibla_direction"] == pytest.approx(58.0, abs=10)


def test_saved_locations_round_trip():
    get_location_book.cache_clear()
    r = client.put("/v1/location/saved/home", json={"latitude": 48.8566, "longitude": 2.3522})
    assert r.status_code == 200
    assert r.json()["location"]["timezone"] == "Europe/Paris"
    assert [item["name"] for item in client.get("/v1/location/saved").json()] == ["home"]
    assert client.delete("/v1/location/saved/home").status_code == 200
    assert client.delete("/v1/location/saved/home").status_code == 404


def test_prayer_times_are_cached():
    get_result_cache().clear()
    payload = {
        "date": "2024-06-14",
        "place": {"latitude": 40.7128, "longitude": -74.0060, "timezone": "America/New_York"},
        "config": {"method": "NorthAmerica", "madhab": "hanafi"},
    }
    first = client.post("/v1/islamic/prayer-times", json=payload)
    second = client.post("/v1/islamic/prayer-times", json=payload)
    assert first.status_code == 200
    assert [p["name"] for p in first.json()["data"]["prayers"]] == ["Fajr", "Dhuhr", "Asr", "Maghrib", "Isha"]
    assert first.json()["meta"]["cached"] is False
    assert second.json()["meta"]["cached"] is True
    assert first.json()["meta"]["cache_key"] == second.json()["meta"]["cache_key"]
    assert first.json()["data"] == second.json()["data"]


def test_prayer_times_current_and_next():
    payload = {
        "date": "2024-06-14",
        "place": {"latitude": 40.7128, "longitude": -74.0060, "timezone": "America/New_York"},
        "at": "2024-06-14T14:00:00-04:00",
    }
    data = client.post("/v1/islamic/prayer-times", json=payload).json()["data"]
    assert data["current_prayer"] == "Dhuhr"
    assert data["next_prayer"] == "Asr"


def test_unknown_prayer_method_rejected():
    r = client.post("/v1/islamic/prayer-times", json={"date": "2024-06-14", "config": {"method": "Nope"}})
    assert r.status_code == 422


def test_missing_place_uses_defaults():
    r = client.post("/v1/islamic/prayer-times", json={"date": "2024-06-14"})
    assert r.status_code == 200
    meta = r.json()["meta"]
    assert meta["place_defaults_used"] is True
    assert meta["default_reason"] == "missing_place"


def test_hijri_date_and_ramadan():
    r = client.get("/v1/islamic/date", params={"date": "2025-03-01"})
    assert r.json()["month_name"] == "Ramadan" and r.json()["is_ramadan"] is True
    r = client.get("/v1/islamic/ramadan/2025")
    assert r.json() == {"year": 2025, "start": "2025-03-01", "end": "2025-03-30", "days": 30}


def test_islamic_holidays_reversed_range():
    r = client.get("/v1/islamic/holidays", params={"start": "2025-12-31", "end": "2025-01-01"})
    assert r.status_code == 422
    assert r.json()["valid"] is False


def test_lunar_illumination():
    r = client.get("/v1/lunar/illumination", params={"at": "2024-01-25T17:54:00Z"})
    assert r.status_code == 200
    assert r.json()["data"]["phase_name"] == "Full Moon"


def test_lunar_events_and_validation():
    r = client.post(
        "/v1/lunar/events",
        json={"start": "2024-01-01T00:00:00Z", "end": "2024-01-31T00:00:00Z", "confidence_level": 0.99},
    )
    assert r.status_code == 200
    events = r.json()["data"]
    assert [e["event_name"] for e in events] == ["ThirdQuarter", "New", "FirstQuarter", "Full"]

    event = {k: events[1][k] for k in ("event_name", "utc_date", "local_solar_date", "julian_date", "accuracy_note")}
    r = client.post(
        "/v1/lunar/validate",
        json={"event": event, "place": {"latitude": 78.2, "longitude": 15.6}},
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert any("polar region" in w for w in data["validation"]["warnings"])
    assert 0.0 <= data["consensus"]["consensus_level"] <= 1.0

    r = client.post("/v1/lunar/compare", json={"event": event})
    assert r.status_code == 200
    assert r.json()["data"]["primary_method"] == "Lunar Periodic Series"


def test_lunar_distances():
    r = client.get(
        "/v1/lunar/distances",
        params={"start": "2024-01-01T00:00:00Z", "end": "2024-01-02T00:00:00Z", "step_hours": 6},
    )
    assert r.status_code == 200
    assert len(r.json()["data"]) == 5


def test_jewish_endpoints():
    place = {"latitude": 40.7128, "longitude": -74.0060, "timezone": "America/New_York"}
    r = client.post("/v1/jewish/sabbath", json={"date": "2024-06-12", "place": place})
    assert r.status_code == 200
    assert r.json()["data"]["friday"] == "2024-06-14"

    r = client.post("/v1/jewish/zmanim", json={"date": "2024-06-14", "place": place})
    assert r.status_code == 200
    assert r.json()["data"]["method"] == "standard"

    r = client.post("/v1/jewish/prayer-times", json={"date": "2024-06-14", "place": place})
    assert [p["name"] for p in r.json()["data"]] == ["Shacharit", "Mincha", "Maariv"]

    r = client.post("/v1/jewish/observances", json={"start": "2024-10-01", "end": "2024-10-13"})
    names = [e["name"] for e in r.json()["data"]]
    assert "Yom Kippur" in names and "Shabbat" in names

    r = client.get("/v1/jewish/date", params={"date": "2024-10-03"})
    body = r.json()
    assert (body["year"], body["month_name"], body["day"]) == (5785, "Tishrei", 1)
    assert body["holidays"] == ["Rosh Hashana"]


def test_christian_endpoints():
    r = client.get("/v1/christian/observances", params={"start": "2024-03-31", "end": "2024-03-31"})
    assert [e["name"] for e in r.json()["data"]] == ["Easter Sunday"]
    r = client.get("/v1/christian/season", params={"date": "2024-05-05", "tradition": "orthodox"})
    assert r.json()["season"] == "easter" and r.json()["easter"] == "2024-05-05"
    r = client.post(
        "/v1/christian/hours",
        json={"date": "2024-06-14", "place": {"latitude": 41.9028, "longitude": 12.4964}},
    )
    assert r.status_code == 200
    assert r.json()["meta"]["tz_inferred"] is True
    assert len(r.json()["data"]) == 7


def test_solar_times_endpoint():
    r = client.get(
        "/v1/solar/times",
        params={"date": "2024-06-21", "latitude": 51.5074, "longitude": -0.1278},
    )
    assert r.status_code == 200
    assert r.json()["data"]["timezone"] == "Europe/London"


def test_lunar_events_with_place_are_validated():
    r = client.post(
        "/v1/lunar/events",
        json={
            "start": "2024-01-01T00:00:00Z",
            "end": "2024-01-15T00:00:00Z",
            "place": {"latitude": 69.65, "longitude": 18.96, "timezone": "Europe/Oslo"},
        },
    )
    assert r.status_code == 200
    for event in r.json()["data"]:
        assert "polar region" in " ".join(event["validation"]["warnings"])
