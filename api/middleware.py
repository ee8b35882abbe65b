import time

import structlog
from fastapi import Request

from core.logging import BusinessEvents


async def log_api_entry(request: Request, call_next):
    """Middleware to log each request with its outcome"""
    # Fresh logger per call so test-time structlog configuration applies
    log = structlog.get_logger(__name__)

    started = time.perf_counter()
    response = await call_next(request)
    log.info(
        BusinessEvents.API_ENTRY,
        method=request.method,
        path=request.url.path,
        client_host=request.client.host if request.client else None,
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 2),
    )
    return response
