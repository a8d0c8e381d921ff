"""Christian calendar endpoints."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from ..deps import get_result_cache, respond
from ..schemas.requests import CanonicalHoursRequest
from ..services import christian_calendar as cc
from ..services.result_cache import ResultCache
from ..services.util.place_defaults import normalize_place


router = APIRouter(prefix="/v1/christian", tags=["christian"])


@router.get("/observances", summary="Feasts and fasts in a date range")
def observances(
    start: date = Query(...),
    end: date = Query(...),
    tradition: cc.ChristianTradition = Query(default="western"),
    cache: ResultCache = Depends(get_result_cache),
):
    return respond(
        cache,
        {"op": "christian.observances", "start": start, "end": end, "tradition": tradition},
        lambda: [
            event.model_dump(mode="json")
            for event in cc.get_christian_observances(start, end, tradition)
        ],
    )


@router.get("/season", summary="Liturgical season of a date")
def season(
    day: date = Query(..., alias="date"),
    tradition: cc.ChristianTradition = Query(default="western"),
):
    return {
        "date": day.isoformat(),
        "tradition": tradition,
        "season": cc.get_liturgical_season(day, tradition),
        "easter": cc.easter(day.year, tradition).isoformat(),
    }


@router.post("/hours", summary="Canonical hours for a date and place")
def hours(req: CanonicalHoursRequest, cache: ResultCache = Depends(get_result_cache)):
    location, flags = normalize_place(req.place.model_dump(exclude_none=True) if req.place else None)
    return respond(
        cache,
        {"op": "christian.hours", "date": req.date, "location": location.model_dump()},
        lambda: [prayer.model_dump(mode="json") for prayer in cc.get_canonical_hours(req.date, location)],
        **flags,
    )
