import pytest

from api.schemas.location import Location
from api.services.errors import InvalidCoordinatesError
from api.services import location
from api.services.location import (
    enrich_location,
    is_high_latitude,
    is_polar_region,
    offset_zone,
    resolve_timezone,
    timezone_info,
    validate_coordinates,
)
from api.services.util.place_defaults import normalize_place


def test_valid_coordinates_have_no_errors():
    result = validate_coordinates(40.7128, -74.0060)
    assert result.valid
    assert result.errors == []


def test_both_axes_reported_together():
    result = validate_coordinates(95.0, -200.0)
    assert not result.valid
    assert result.errors == [
        "Latitude must be between -90 and 90 degrees",
        "Longitude must be between -180 and 180 degrees",
    ]


def test_nan_is_not_a_number():
    result = validate_coordinates(float("nan"), 0.0)
    assert result.errors == ["Latitude must be a number"]


def test_polar_and_high_latitude_bands():
    assert is_polar_region(70.0) and is_polar_region(-80.0)
    assert not is_polar_region(66.5)
    assert is_high_latitude(62.0) and is_high_latitude(66.5)
    assert not is_high_latitude(59.9) and not is_high_latitude(70.0)


def test_supplied_zone_wins():
    assert resolve_timezone(40.7128, -74.0060, "Europe/Paris") == "Europe/Paris"


def test_polygon_lookup_new_york():
    assert resolve_timezone(40.7128, -74.0060) == "America/New_York"


def test_offset_table_when_polygon_lookup_disabled(monkeypatch):
    monkeypatch.setenv("TIMEZONE_LOOKUP", "offset")
    assert resolve_timezone(35.6762, 139.6503) == "Asia/Tokyo"
    assert offset_zone(-179.0) == "Pacific/Kwajalein"


def test_unknown_supplied_zone_falls_through(monkeypatch):
    monkeypatch.setenv("TIMEZONE_LOOKUP", "offset")
    assert resolve_timezone(51.5, 0.1, "Not/AZone") == "Europe/London"


def test_resolve_rejects_bad_coordinates():
    with pytest.raises(InvalidCoordinatesError) as exc:
        resolve_timezone(91.0, 0.0)
    assert exc.value.errors == ["Latitude must be between -90 and 90 degrees"]


def test_timezone_info_summer_and_winter():
    from datetime import datetime, timezone

    summer = timezone_info("America/New_York", datetime(2024, 7, 1, 12, tzinfo=timezone.utc))
    winter = timezone_info("America/New_York", datetime(2024, 1, 15, 12, tzinfo=timezone.utc))
    assert summer.offset_minutes == -240 and summer.is_dst and summer.utc_offset == "-04:00"
    assert winter.offset_minutes == -300 and not winter.is_dst
    assert winter.abbreviation == "EST"


def test_enrich_fills_zone_and_elevation():
    enriched = enrich_location(Location(latitude=48.8566, longitude=2.3522))
    assert enriched.timezone == "Europe/Paris"
    assert enriched.elevation == 0.0


def test_missing_place_uses_defaults():
    location, flags = normalize_place(None)
    assert flags["place_defaults_used"] is True
    assert flags["default_reason"] == "missing_place"
    assert location.timezone == "Asia/Riyadh"


def test_missing_tz_is_inferred():
    location, flags = normalize_place({"latitude": 48.8566, "longitude": 2.3522})
    assert flags["tz_inferred"] is True
    assert flags["default_reason"] == "missing_tz"
    assert location.timezone == "Europe/Paris"


def test_only_tz_uses_default_coords(monkeypatch):
    monkeypatch.setenv("DEFAULT_PLACE_LAT", "51.5074")
    monkeypatch.setenv("DEFAULT_PLACE_LON", "-0.1278")
    location, flags = normalize_place({"timezone": "Europe/London"})
    assert flags["default_reason"] == "missing_latlon"
    assert location.latitude == pytest.approx(51.5074)
    assert location.timezone == "Europe/London"


def test_normalize_place_reports_every_coordinate_error():
    with pytest.raises(InvalidCoordinatesError) as exc:
        normalize_place({"latitude": 95, "longitude": -200})
    assert len(exc.value.errors) == 2


def test_timezone_finder_is_built_once():
    assert location._finder() is location._finder()


def test_host_zone_from_localtime_link(monkeypatch, tmp_path):
    link = tmp_path / "localtime"
    link.symlink_to(tmp_path / "zoneinfo" / "Europe" / "Berlin")
    monkeypatch.delenv("TZ", raising=False)
    monkeypatch.setattr(location, "LOCALTIME_PATH", str(link))
    assert location._host_zone() == "Europe/Berlin"


def test_host_zone_prefers_tz_variable(monkeypatch, tmp_path):
    monkeypatch.setenv("TZ", ":Asia/Tokyo")
    monkeypatch.setattr(location, "LOCALTIME_PATH", str(tmp_path / "missing"))
    assert location._host_zone() == "Asia/Tokyo"
    monkeypatch.setenv("TZ", "Nowhere/Special")
    assert location._host_zone() is None
