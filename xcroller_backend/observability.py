"""
Observability helpers (request id + timing) for aiohttp routes.
"""

from __future__ import annotations

import time
from uuid import uuid4

from aiohttp import web

from .shared import get_logger, request_id_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
SLOW_REQUEST_MS = 750.0


def _get_request_id(request: web.Request) -> str:
    rid = (request.headers.get(REQUEST_ID_HEADER) or "").strip()
    return rid[:128] or uuid4().hex


@web.middleware
async def request_context_middleware(request: web.Request, handler):
    """Bind a request id to the logging context and echo it on the response."""
    rid = _get_request_id(request)
    request["xcroller_request_id"] = rid
    token = request_id_var.set(rid)
    start = time.perf_counter()
    status: int | None = None
    try:
        response = await handler(request)
        status = response.status
        response.headers[REQUEST_ID_HEADER] = rid
        return response
    except web.HTTPException as exc:
        status = exc.status
        exc.headers[REQUEST_ID_HEADER] = rid
        raise
    except Exception:
        status = 500
        logger.exception("Unhandled error in %s %s", request.method, request.path)
        raise
    finally:
        duration_ms = (time.perf_counter() - start) * 1000.0
        if status is not None and status >= 500:
            logger.error("%s %s -> %s (%.1fms)", request.method, request.path, status, duration_ms)
        elif duration_ms >= SLOW_REQUEST_MS:
            logger.warning("Slow request %s %s -> %s (%.1fms)", request.method, request.path, status, duration_ms)
        else:
            logger.debug("%s %s -> %s (%.1fms)", request.method, request.path, status, duration_ms)
        request_id_var.reset(token)
