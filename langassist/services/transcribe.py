"""AssemblyAI integration using the submit-then-poll REST API."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable

import httpx

from langassist.config.settings import AssemblyAIConfig
from langassist.exceptions import (
    TranscriptionError,
    TranscriptionTimeoutError,
    UpstreamError,
)
from langassist.telemetry import observe_poll_attempts

logger = logging.getLogger(__name__)


class TranscriptStatus(str, Enum):
    """Job states reported by the transcription service."""

    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (TranscriptStatus.COMPLETED, TranscriptStatus.ERROR)


@dataclass(frozen=True)
class TranscriptionJob:
    """Snapshot of an asynchronous transcription job after one status check."""

    job_id: str
    status: TranscriptStatus
    text: str | None = None
    error: str | None = None

    @classmethod
    def from_payload(cls, job_id: str, payload: dict[str, Any]) -> "TranscriptionJob":
        raw_status = str(payload.get("status") or "").lower()
        try:
            job_status = TranscriptStatus(raw_status)
        except ValueError as exc:
            raise UpstreamError(
                f"Transcription service returned unknown status '{raw_status}'",
                cause=exc,
            ) from exc
        text = payload.get("text")
        if job_status is TranscriptStatus.COMPLETED and not (text or "").strip():
            # Completed jobs always carry text.
            raise TranscriptionError("Transcription completed without any text")
        return cls(
            job_id=job_id,
            status=job_status,
            text=text if job_status is TranscriptStatus.COMPLETED else None,
            error=payload.get("error"),
        )


class TranscriptionClient:
    """Submit an audio URL and poll the job until it settles or times out."""

    def __init__(
        self,
        config: AssemblyAIConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        poll_interval: float | None = None,
        max_attempts: int | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._config = config
        self._http_client = http_client
        self._poll_interval = (
            config.poll_interval_seconds if poll_interval is None else poll_interval
        )
        self._max_attempts = config.max_poll_attempts if max_attempts is None else max_attempts
        if self._max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._sleep = sleep

    @property
    def poll_interval(self) -> float:
        return self._poll_interval

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def _headers(self) -> dict[str, str]:
        return {"authorization": self._config.api_key.get_secret_value()}

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.request_timeout_seconds,
        )

    async def transcribe(self, audio_url: str) -> str:
        """Return the transcript text for ``audio_url``."""

        if self._http_client is not None:
            return await self._run(self._http_client, audio_url)
        async with self._client() as client:
            return await self._run(client, audio_url)

    async def _run(self, client: httpx.AsyncClient, audio_url: str) -> str:
        job_id = await self.submit(client, audio_url)
        logger.info("Transcription submitted job=%s", job_id)

        for attempt in range(1, self._max_attempts + 1):
            await self._sleep(self._poll_interval)
            job = await self.poll(client, job_id)
            logger.debug("Transcription poll job=%s attempt=%s status=%s", job_id, attempt, job.status.value)

            if job.status is TranscriptStatus.COMPLETED:
                observe_poll_attempts(attempt)
                logger.info("Transcription completed job=%s attempts=%s", job_id, attempt)
                return job.text or ""
            if job.status is TranscriptStatus.ERROR:
                observe_poll_attempts(attempt)
                logger.warning("Transcription failed job=%s error=%s", job_id, job.error)
                raise TranscriptionError(
                    f"Transcription failed: {job.error}" if job.error else "Transcription failed"
                )

        observe_poll_attempts(self._max_attempts)
        logger.warning("Transcription timed out job=%s attempts=%s", job_id, self._max_attempts)
        raise TranscriptionTimeoutError("Transcription timeout", attempts=self._max_attempts)

    async def submit(self, client: httpx.AsyncClient, audio_url: str) -> str:
        """Create the transcription job and return its id."""

        try:
            response = await client.post(
                "/transcript",
                json={"audio_url": audio_url},
                headers=self._headers(),
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            logger.exception("Transcription submission failed")
            raise UpstreamError(f"Transcription submission failed: {exc}", cause=exc) from exc
        except ValueError as exc:
            raise UpstreamError("Transcription service returned invalid JSON", cause=exc) from exc

        job_id = payload.get("id") if isinstance(payload, dict) else None
        if not job_id:
            raise UpstreamError("Transcription service did not return a job id")
        return str(job_id)

    async def poll(self, client: httpx.AsyncClient, job_id: str) -> TranscriptionJob:
        """Fetch the current state of ``job_id``."""

        try:
            response = await client.get(f"/transcript/{job_id}", headers=self._headers())
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            logger.exception("Transcription status check failed job=%s", job_id)
            raise UpstreamError(f"Transcription status check failed: {exc}", cause=exc) from exc
        except ValueError as exc:
            raise UpstreamError("Transcription service returned invalid JSON", cause=exc) from exc

        if not isinstance(payload, dict):
            raise UpstreamError("Transcription service returned an unexpected payload")
        return TranscriptionJob.from_payload(job_id, payload)


__all__ = [
    "TranscriptStatus",
    "TranscriptionJob",
    "TranscriptionClient",
]
