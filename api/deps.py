"""Application-owned shared objects, handed to routers through ``Depends``."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Callable, Dict

from .services.location_book import LocationBook
from .services.result_cache import ResultCache


@lru_cache(maxsize=1)
def get_result_cache() -> ResultCache:
    return ResultCache()


@lru_cache(maxsize=1)
def get_location_book() -> LocationBook:
    return LocationBook()


def respond(
    cache: ResultCache,
    inputs: Dict[str, Any],
    compute: Callable[[], Any],
    **meta: Any,
) -> Dict[str, Any]:
    """Wrap a (possibly cached) JSON-ready result in the response envelope."""

    data, key, cached = cache.get_or_compute(inputs, compute)
    return {"data": data, "meta": {"cached": cached, "cache_key": key, **meta}}
