"""Helpers for normalising place inputs on calendar requests."""

import os
from typing import Any, Dict, Optional, Tuple

from ...schemas.location import Location
from ..location import require_valid_coordinates, resolve_timezone


def _defaults() -> Dict[str, Any]:
    return {
        "latitude": float(os.getenv("DEFAULT_PLACE_LAT", "21.4225")),
        "longitude": float(os.getenv("DEFAULT_PLACE_LON", "39.8262")),
        "timezone": os.getenv("DEFAULT_PLACE_TZ", "Asia/Riyadh"),
        "label": os.getenv("DEFAULT_PLACE_LABEL", "Mecca, Saudi Arabia"),
    }


def normalize_place(place: Optional[Dict[str, Any]]) -> Tuple[Location, Dict[str, Any]]:
    """Fill in a partial place payload and capture how it was completed.

    Supplied coordinates are range checked here so the caller gets every
    coordinate error at once instead of pydantic's first failure.
    """

    flags: Dict[str, Any] = {
        "place_defaults_used": False,
        "tz_inferred": False,
        "default_reason": None,
        "place_label": None,
    }
    defaults = _defaults()

    if not place:
        flags.update(
            {
                "place_defaults_used": True,
                "default_reason": "missing_place",
                "place_label": defaults["label"],
            }
        )
        return (
            Location(
                latitude=defaults["latitude"],
                longitude=defaults["longitude"],
                timezone=defaults["timezone"],
                elevation=0.0,
            ),
            flags,
        )

    lat = place.get("latitude")
    lon = place.get("longitude")
    tz = place.get("timezone")
    elevation = place.get("elevation")
    label = place.get("label")

    if lat is None or lon is None:
        flags.update({"place_defaults_used": True, "default_reason": "missing_latlon"})
        flags["place_label"] = label or defaults["label"]
        return (
            Location(
                latitude=defaults["latitude"],
                longitude=defaults["longitude"],
                timezone=tz or defaults["timezone"],
                elevation=elevation,
            ),
            flags,
        )

    lat, lon = float(lat), float(lon)
    require_valid_coordinates(lat, lon)
    if not tz:
        tz = resolve_timezone(lat, lon)
        flags["tz_inferred"] = True
        flags["default_reason"] = "missing_tz"

    flags["place_label"] = label or f"{lat:.4f}, {lon:.4f}"
    return Location(latitude=lat, longitude=lon, timezone=tz, elevation=elevation), flags
