"""Application middleware package."""

from .logging import REQUEST_ID_HEADER, StructuredLoggingMiddleware, request_id_for
from .telemetry import TelemetryMiddleware

__all__ = [
    "REQUEST_ID_HEADER",
    "StructuredLoggingMiddleware",
    "TelemetryMiddleware",
    "request_id_for",
]
