"""Lunar ephemeris and accuracy endpoints."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..deps import get_result_cache, respond
from ..schemas.requests import LunarEventCheckRequest, LunarEventsRequest
from ..services import accuracy, lunar_ephemeris, precision_lunar
from ..services.julian import ensure_aware
from ..services.result_cache import ResultCache
from ..services.util.place_defaults import normalize_place


router = APIRouter(prefix="/v1/lunar", tags=["lunar"])


def _place_payload(place) -> Optional[dict]:
    return place.model_dump(exclude_none=True) if place else None


@router.get("/illumination", summary="Lunar illumination, phase and libration at an instant")
def illumination(
    at: Optional[datetime] = Query(default=None, description="Instant; defaults to now (UTC)"),
    cache: ResultCache = Depends(get_result_cache),
):
    instant = ensure_aware(at) if at else datetime.now(timezone.utc)
    return respond(
        cache,
        {"op": "lunar.illumination", "at": instant.isoformat()},
        lambda: lunar_ephemeris.calculate_illumination(instant).model_dump(mode="json"),
    )


@router.post("/events", summary="Cardinal phase events with accuracy estimates")
def events(req: LunarEventsRequest, cache: ResultCache = Depends(get_result_cache)):
    location = None
    flags = {}
    if req.place is not None:
        location, flags = normalize_place(_place_payload(req.place))

    def compute():
        found = lunar_ephemeris.calculate_lunar_events(
            req.start,
            req.end,
            location,
            confidence_level=req.confidence_level,
            methods=req.methods,
        )
        if location is None:
            return [event.model_dump(mode="json") for event in found]
        return [
            {
                **event.model_dump(mode="json"),
                "validation": accuracy.validate_enhanced_lunar_event(event, location).model_dump(mode="json"),
            }
            for event in found
        ]

    inputs = {
        "op": "lunar.events",
        "request": req.model_dump(mode="json"),
        "location": location.model_dump() if location else None,
    }
    return respond(cache, inputs, compute, **flags)


@router.post("/validate", summary="Validate a lunar event for a location")
def validate(req: LunarEventCheckRequest):
    location, flags = normalize_place(_place_payload(req.place))
    alternatives = precision_lunar.get_alternative_calculations(req.event)
    return {
        "data": {
            "validation": accuracy.validate_lunar_calculation(req.event, location).model_dump(mode="json"),
            "uncertainty": accuracy.estimate_uncertainty(
                req.event.utc_date, location, alternatives
            ).model_dump(mode="json"),
            "consensus": accuracy.assess_method_consensus(alternatives).model_dump(mode="json"),
        },
        "meta": flags,
    }


@router.post("/compare", summary="Compare the alternative calculation methods for an event")
def compare(req: LunarEventCheckRequest, cache: ResultCache = Depends(get_result_cache)):
    def compute():
        alternatives = precision_lunar.get_alternative_calculations(req.event)
        return accuracy.compare_methods(req.event, alternatives).model_dump(mode="json")

    return respond(cache, {"op": "lunar.compare", "event": req.event.model_dump(mode="json")}, compute)


@router.get("/distances", summary="Earth-Moon distance sampled over a range")
def distances(
    start: datetime = Query(...),
    end: datetime = Query(...),
    step_hours: float = Query(default=24.0, gt=0),
    cache: ResultCache = Depends(get_result_cache),
):
    def compute():
        samples = lunar_ephemeris.sample_distances(start, end, step_hours)
        return [{"time": moment.isoformat(), "distance_km": km} for moment, km in samples]

    inputs = {"op": "lunar.distances", "start": start, "end": end, "step_hours": step_hours}
    return respond(cache, inputs, compute)
