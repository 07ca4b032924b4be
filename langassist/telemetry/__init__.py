"""Telemetry helpers and metrics."""

from .metrics import (
    ERROR_COUNTER,
    PIPELINE_RUNS,
    PIPELINE_STAGE_LATENCY,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    TRANSCRIPTION_POLL_ATTEMPTS,
    observe_poll_attempts,
    observe_request,
    observe_stage,
    record_pipeline_outcome,
)

__all__ = [
    "ERROR_COUNTER",
    "PIPELINE_RUNS",
    "PIPELINE_STAGE_LATENCY",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "TRANSCRIPTION_POLL_ATTEMPTS",
    "observe_poll_attempts",
    "observe_request",
    "observe_stage",
    "record_pipeline_outcome",
]
