"""Prometheus metrics definitions and helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests processed",
    ("method", "route", "status"),
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ("method", "route"),
    buckets=(
        0.005,
        0.01,
        0.025,
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.5,
        5.0,
        10.0,
        30.0,
        60.0,
    ),
)

ERROR_COUNTER = Counter(
    "app_internal_errors_total",
    "Number of requests ending in internal server error responses",
    ("method", "route"),
)

PIPELINE_RUNS = Counter(
    "pipeline_runs_total",
    "Pipeline flow executions by outcome",
    ("flow", "outcome"),
)

PIPELINE_STAGE_LATENCY = Histogram(
    "pipeline_stage_duration_seconds",
    "Duration of individual pipeline stages in seconds",
    ("flow", "stage"),
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0),
)

TRANSCRIPTION_POLL_ATTEMPTS = Histogram(
    "transcription_poll_attempts",
    "Status checks issued per transcription job",
    buckets=(1, 2, 3, 5, 8, 13, 21, 30),
)


def observe_request(
    method: str,
    route: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """Record metrics for a completed HTTP request."""

    safe_route = route or "unknown"
    safe_method = method or "UNKNOWN"
    status_label = str(status_code)
    observed_duration = duration_seconds if duration_seconds >= 0 else 0

    REQUEST_COUNT.labels(
        method=safe_method,
        route=safe_route,
        status=status_label,
    ).inc()
    REQUEST_LATENCY.labels(
        method=safe_method,
        route=safe_route,
    ).observe(observed_duration)

    if status_code >= 500:
        ERROR_COUNTER.labels(
            method=safe_method,
            route=safe_route,
        ).inc()


def observe_stage(flow: str, stage: str, duration_seconds: float) -> None:
    """Record how long one pipeline stage took."""

    PIPELINE_STAGE_LATENCY.labels(flow=flow, stage=stage).observe(max(0.0, duration_seconds))


def record_pipeline_outcome(flow: str, outcome: str) -> None:
    PIPELINE_RUNS.labels(flow=flow, outcome=outcome).inc()


def observe_poll_attempts(attempts: int) -> None:
    TRANSCRIPTION_POLL_ATTEMPTS.observe(attempts)
