"""Error taxonomy shared by every stage of the assist pipelines.

All errors surfaced to callers derive from :class:`PipelineError`, which
carries the HTTP status the controller layer should answer with. The
FastAPI exception handler in ``langassist.main`` renders them uniformly
as ``{"error": message}``.
"""

from __future__ import annotations

from fastapi import status


class PipelineError(Exception):
    """Base class for failures that abort a pipeline flow."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class InputError(PipelineError):
    """Raised when request fields are missing or invalid."""

    status_code = status.HTTP_400_BAD_REQUEST


class UploadError(PipelineError):
    """Raised when the audio payload could not be pushed to object storage."""

    status_code = status.HTTP_502_BAD_GATEWAY


class TranscriptionError(PipelineError):
    """Raised when the transcription service reports a failed job."""

    status_code = status.HTTP_502_BAD_GATEWAY


class TranscriptionTimeoutError(PipelineError, TimeoutError):
    """Raised when the poll budget is exhausted before a terminal status."""

    status_code = status.HTTP_504_GATEWAY_TIMEOUT

    def __init__(self, message: str, *, attempts: int, cause: Exception | None = None) -> None:
        self.attempts = attempts
        super().__init__(message, cause=cause)


class UpstreamError(PipelineError):
    """Raised when any other upstream call (LLM, TTS, status checks) fails."""

    status_code = status.HTTP_502_BAD_GATEWAY


class PipelineCancelled(PipelineError):
    """Raised at a stage boundary once the caller has gone away."""

    status_code = 499


class ParseError(ValueError):
    """Raised when a model response does not match its expected structure.

    Never surfaced to callers: the content processor catches it in its
    fallback branch and returns a degraded result instead.
    """

    def __init__(self, message: str, raw_text: str) -> None:
        self.raw_text = raw_text
        super().__init__(message)


__all__ = [
    "PipelineError",
    "InputError",
    "UploadError",
    "TranscriptionError",
    "TranscriptionTimeoutError",
    "UpstreamError",
    "PipelineCancelled",
    "ParseError",
]
