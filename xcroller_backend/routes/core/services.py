"""
Access to the service container stored on the aiohttp application.
"""
from typing import Any

from aiohttp import web

from xcroller_backend.shared import ErrorCode, Result

SERVICES_KEY: web.AppKey[dict] = web.AppKey("xcroller_services", dict)
SERVICES_ERROR_KEY: web.AppKey[str] = web.AppKey("xcroller_services_error", str)


def _require_services(request: web.Request) -> tuple[dict[str, Any] | None, Result[Any] | None]:
    """Return `(services, None)` or `(None, error_result)` when start-up failed."""
    services = request.app.get(SERVICES_KEY)
    if services:
        return services, None
    return None, Result.Err(
        ErrorCode.SERVICE_UNAVAILABLE,
        "Services are unavailable",
        detail=request.app.get(SERVICES_ERROR_KEY) or "Initialization failed",
    )
