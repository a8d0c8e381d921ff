"""Islamic calendar and prayer-time endpoints."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from ..deps import get_result_cache, respond
from ..schemas.requests import IslamicPrayerRequest
from ..services import islamic_calendar as ic
from ..services.julian import ensure_aware
from ..services.result_cache import ResultCache
from ..services.util.place_defaults import normalize_place


router = APIRouter(prefix="/v1/islamic", tags=["islamic"])


@router.post("/prayer-times", summary="The five daily prayers for a date and place")
def prayer_times(req: IslamicPrayerRequest, cache: ResultCache = Depends(get_result_cache)):
    place_payload = req.place.model_dump(exclude_none=True) if req.place else None
    location, flags = normalize_place(place_payload)

    def compute():
        prayers = ic.get_prayer_times(
            req.date, location, req.config, include_sunrise=req.include_sunrise
        )
        return {
            "date": req.date.isoformat(),
            "hijri_date": ic.gregorian_to_hijri(req.date).model_dump(),
            "qibla_direction": ic.get_qibla_direction(location),
            "prayers": [prayer.model_dump(mode="json") for prayer in prayers],
        }

    inputs = {
        "op": "islamic.prayer_times",
        "date": req.date,
        "location": location.model_dump(),
        "config": req.config.model_dump(),
        "include_sunrise": req.include_sunrise,
    }
    body = respond(cache, inputs, compute, **flags)

    if req.at is not None:
        at = ensure_aware(req.at)
        prayers = ic.get_prayer_times(req.date, location, req.config)
        current = ic.get_current_prayer(prayers, at)
        upcoming = ic.get_next_prayer(prayers, at)
        body["data"] = {
            **body["data"],
            "current_prayer": current.name if current else None,
            "next_prayer": upcoming.name if upcoming else None,
        }
    return body


@router.get("/date", summary="Tabular Hijri date for a Gregorian date")
def hijri_date(day: date = Query(..., alias="date")):
    hijri = ic.gregorian_to_hijri(day)
    return {**hijri.model_dump(), "is_ramadan": hijri.month == 9}


@router.get("/holidays", summary="Islamic holidays in a date range")
def holidays(
    start: date = Query(...),
    end: date = Query(...),
    cache: ResultCache = Depends(get_result_cache),
):
    return respond(
        cache,
        {"op": "islamic.holidays", "start": start, "end": end},
        lambda: [event.model_dump(mode="json") for event in ic.get_islamic_holidays(start, end)],
    )


@router.get("/ramadan/{year}", summary="First and last day of Ramadan starting in a Gregorian year")
def ramadan(year: int):
    first, last = ic.get_ramadan_dates(year)
    return {"year": year, "start": first.isoformat(), "end": last.isoformat(), "days": (last - first).days + 1}
