import json
import logging
import os
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

access_log = logging.getLogger("api.access")


class LoggingMiddleware(BaseHTTPMiddleware):
    """One JSON access record per request when LOGGING_ENABLED=true."""

    async def dispatch(self, request: Request, call_next):
        if os.getenv("LOGGING_ENABLED", "false").lower() != "true":
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        record = {
            "ts": round(time.time(), 3),
            "ip": request.client.host if request.client else None,
            "api_key": getattr(request.state, "api_key", None),
            "endpoint": request.url.path,
            "method": request.method,
            "status": response.status_code,
            "latency_ms": round((time.perf_counter() - start) * 1000, 2),
        }
        access_log.info(json.dumps(record))
        return response
