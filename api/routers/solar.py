"""Solar times endpoint."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..deps import get_result_cache, respond
from ..services.location import require_valid_coordinates
from ..services.result_cache import ResultCache
from ..services.solar_times import get_solar_times


router = APIRouter(prefix="/v1/solar", tags=["solar"])


@router.get("/times", summary="Sunrise, sunset, noon, golden hour and twilights")
def times(
    day: date = Query(..., alias="date"),
    latitude: float = Query(...),
    longitude: float = Query(...),
    elevation: float = Query(default=0.0),
    tz: Optional[str] = Query(default=None),
    cache: ResultCache = Depends(get_result_cache),
):
    require_valid_coordinates(latitude, longitude)
    inputs = {
        "op": "solar.times",
        "date": day,
        "lat": latitude,
        "lon": longitude,
        "elevation": elevation,
        "tz": tz,
    }
    return respond(
        cache,
        inputs,
        lambda: get_solar_times(
            day, latitude, longitude, elevation=elevation, timezone=tz
        ).model_dump(mode="json"),
    )
