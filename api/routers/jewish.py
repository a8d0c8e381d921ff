"""Jewish calendar, Shabbat and zmanim endpoints."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from ..deps import get_result_cache, respond
from ..schemas.requests import JewishDayRequest, JewishObservancesRequest
from ..services import jewish_calendar as jc
from ..services.hebrew_calendar import gregorian_to_hebrew, is_shabbat
from ..services.result_cache import ResultCache
from ..services.util.place_defaults import normalize_place


router = APIRouter(prefix="/v1/jewish", tags=["jewish"])


def _location(req):
    return normalize_place(req.place.model_dump(exclude_none=True) if req.place else None)


def _day_inputs(op: str, req: JewishDayRequest, location) -> dict:
    return {
        "op": op,
        "date": req.date,
        "location": location.model_dump(),
        "config": req.config.model_dump(),
    }


@router.post("/sabbath", summary="Candle lighting and havdalah for the Shabbat of a date")
def sabbath(req: JewishDayRequest, cache: ResultCache = Depends(get_result_cache)):
    location, flags = _location(req)
    return respond(
        cache,
        _day_inputs("jewish.sabbath", req, location),
        lambda: jc.get_sabbath_times(req.date, location, req.config).model_dump(mode="json"),
        **flags,
    )


@router.post("/observances", summary="Holidays and Shabbatot in a date range")
def observances(req: JewishObservancesRequest, cache: ResultCache = Depends(get_result_cache)):
    location, flags = _location(req) if req.place else (None, {})
    inputs = {
        "op": "jewish.observances",
        "start": req.start,
        "end": req.end,
        "location": location.model_dump() if location else None,
        "config": req.config.model_dump(),
    }
    return respond(
        cache,
        inputs,
        lambda: [
            event.model_dump(mode="json")
            for event in jc.get_jewish_observances(req.start, req.end, location, req.config)
        ],
        **flags,
    )


@router.post("/zmanim", summary="Halachic times of day")
def zmanim(req: JewishDayRequest, cache: ResultCache = Depends(get_result_cache)):
    location, flags = _location(req)
    return respond(
        cache,
        _day_inputs("jewish.zmanim", req, location),
        lambda: jc.get_zmanim(req.date, location, req.config).model_dump(mode="json"),
        **flags,
    )


@router.post("/prayer-times", summary="Shacharit, Mincha and Maariv")
def prayer_times(req: JewishDayRequest, cache: ResultCache = Depends(get_result_cache)):
    location, flags = _location(req)
    return respond(
        cache,
        _day_inputs("jewish.prayer_times", req, location),
        lambda: [
            prayer.model_dump(mode="json")
            for prayer in jc.get_jewish_prayer_times(req.date, location, req.config)
        ],
        **flags,
    )


@router.get("/date", summary="Hebrew date and holidays for a Gregorian date")
def hebrew_date(day: date = Query(..., alias="date")):
    return {
        **gregorian_to_hebrew(day).model_dump(),
        "is_shabbat": is_shabbat(day),
        "holidays": [event.name for event in jc.get_jewish_holiday(day)],
    }
