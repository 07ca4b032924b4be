"""Request logging middleware.

Every request gets an id (taken from ``X-Request-ID`` when the caller sends
one) that is stored on ``request.state`` so the pipeline logs of the same
request can be correlated with the access line written here.
"""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

logger = logging.getLogger("langassist.middleware.structured")

COLOR_RESET = "\u001b[0m"
COLOR_GREEN = "\u001b[32m"
COLOR_CYAN = "\u001b[36m"
COLOR_YELLOW = "\u001b[33m"
COLOR_RED = "\u001b[31m"

REQUEST_ID_HEADER = "X-Request-ID"

_CONSOLE_FIELDS = (
    "timestamp",
    "request_id",
    "method",
    "path",
    "client_ip",
    "status_code",
    "duration_ms",
)


def request_id_for(request: Request) -> str | None:
    """Return the id assigned to ``request`` by the middleware, if any."""

    return getattr(request.state, "request_id", None)


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Write one access line per request and echo the request id back."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        started = time.perf_counter()
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex[:12]
        request.state.request_id = request_id

        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "query": request.url.query or None,
            "client_ip": request.client.host if request.client else None,
            "content_type": request.headers.get("content-type"),
            "content_length": request.headers.get("content-length"),
        }

        try:
            response = await call_next(request)
        except Exception as exc:
            entry.update(status_code=500, duration_ms=_elapsed_ms(started), error=repr(exc))
            logger.exception(_console_line(entry))
            raise

        entry.update(status_code=response.status_code, duration_ms=_elapsed_ms(started))
        logger.info(_console_line(entry))
        logger.debug(json.dumps(entry, default=str, separators=(",", ":")))
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


def _status_color(status: int) -> str:
    if 200 <= status < 300:
        return COLOR_GREEN
    if 400 <= status < 500:
        return COLOR_YELLOW
    if status >= 500:
        return COLOR_RED
    return COLOR_CYAN


def _console_line(entry: dict[str, Any]) -> str:
    """Render the entry as ``key=value`` pairs wrapped in an ANSI color."""

    message = ", ".join(
        f"{name}={entry[name] if entry.get(name) is not None else '-'}" for name in _CONSOLE_FIELDS
    )
    return f"{_status_color(entry.get('status_code') or 0)}{message}{COLOR_RESET}"


__all__ = ["REQUEST_ID_HEADER", "StructuredLoggingMiddleware", "request_id_for"]
