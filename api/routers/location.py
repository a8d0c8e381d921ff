"""Coordinate validation, timezone lookup, Qibla and saved locations."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..deps import get_location_book
from ..schemas.location import Location
from ..schemas.requests import CoordinatesIn, PlaceIn
from ..services.islamic_calendar import get_qibla_direction
from ..services.location import (
    is_high_latitude,
    is_polar_region,
    require_valid_coordinates,
    resolve_timezone,
    timezone_info,
    validate_coordinates,
)
from ..services.location_book import LocationBook
from ..services.util.place_defaults import normalize_place


router = APIRouter(prefix="/v1/location", tags=["location"])


@router.post("/validate", summary="Check a coordinate pair")
def validate(req: CoordinatesIn):
    result = validate_coordinates(req.latitude, req.longitude)
    body = result.model_dump()
    if result.valid:
        body["polar_region"] = is_polar_region(req.latitude)
        body["high_latitude"] = is_high_latitude(req.latitude)
    return body


@router.post("/timezone", summary="Resolve the IANA zone and current offset for a place")
def timezone(req: PlaceIn, at: Optional[datetime] = Query(default=None)):
    if req.latitude is None or req.longitude is None:
        raise HTTPException(status_code=422, detail="latitude and longitude are required")
    require_valid_coordinates(req.latitude, req.longitude)
    zone = resolve_timezone(req.latitude, req.longitude, req.timezone)
    return timezone_info(zone, at).model_dump()


@router.get("/qibla", summary="Initial great-circle bearing towards the Kaaba")
def qibla(latitude: float = Query(...), longitude: float = Query(...)):
    location, _ = normalize_place({"latitude": latitude, "longitude": longitude})
    return {"latitude": latitude, "longitude": longitude, "qibla_direction": get_qibla_direction(location)}


@router.get("/saved", summary="List saved locations")
def list_saved(book: LocationBook = Depends(get_location_book)):
    return [{"name": name, "location": location.model_dump()} for name, location in book.list()]


@router.put("/saved/{name}", summary="Save or replace a named location")
def save(name: str, req: PlaceIn, book: LocationBook = Depends(get_location_book)):
    if req.latitude is None or req.longitude is None:
        raise HTTPException(status_code=422, detail="latitude and longitude are required")
    require_valid_coordinates(req.latitude, req.longitude)
    location = Location(
        latitude=req.latitude,
        longitude=req.longitude,
        elevation=req.elevation,
        timezone=resolve_timezone(req.latitude, req.longitude, req.timezone),
    )
    return {"name": name, "location": book.save(name, location).model_dump()}


@router.delete("/saved/{name}", summary="Remove a saved location")
def delete(name: str, book: LocationBook = Depends(get_location_book)):
    if not book.delete(name):
        raise HTTPException(status_code=404, detail=f"No saved location named {name!r}")
    return {"deleted": name}
