"""Orchestration of the three assist flows.

Each flow is a fixed sequence of stages. A failing stage raises a
:class:`~langassist.exceptions.PipelineError` that aborts every remaining
stage; nothing partial is ever returned. Before each stage the optional
cancellation probe is consulted so a disconnected caller stops the run at
the next boundary.

* Text Assist: content processing (text-assist prompt).
* Voice Assistant: upload, transcription, content processing, synthesis.
* Practice Mode: upload, transcription, pronunciation evaluation.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Protocol, Tuple
from uuid import uuid4

from langassist.exceptions import InputError, PipelineCancelled, PipelineError
from langassist.services.storage import UploadResult
from langassist.services.tts import SynthesizedAudio
from langassist.telemetry import observe_stage, record_pipeline_outcome

from .processing import ContentProcessor
from .prompts import build_text_assist_prompt
from .types import AssistRequest, AudioPayload, Flow, PipelineStage, Role

logger = logging.getLogger("langassist.pipeline")
transcript_logger = logging.getLogger("langassist.logs.transcript")

CancellationProbe = Callable[[], Awaitable[bool]]

VOICE_RESPONSE_MIME_TYPE = "audio/mpeg"
VOICE_RESPONSE_FILE_NAME = "response.mp3"


class AudioUploader(Protocol):
    async def upload(self, audio_bytes: bytes, mime_type: str) -> UploadResult: ...


class Transcriber(Protocol):
    async def transcribe(self, audio_url: str) -> str: ...


class Synthesizer(Protocol):
    async def synthesize(self, text: str) -> SynthesizedAudio: ...


@dataclass
class _FlowRun:
    """Per-request bookkeeping; never shared between pipeline executions."""

    flow: Flow
    is_cancelled: Optional[CancellationProbe] = None
    request_id: str = field(default_factory=lambda: _new_request_id())

    async def checkpoint(self, stage: str) -> None:
        if self.is_cancelled is not None and await self.is_cancelled():
            logger.info("flow=%s request=%s cancelled before stage=%s", self.flow.value, self.request_id, stage)
            raise PipelineCancelled(f"Request cancelled before {stage}")


def _new_request_id() -> str:
    return uuid4().hex[:12]


def _require_audio(request: AssistRequest) -> AudioPayload:
    if request.audio is None:
        raise InputError("No audio file provided")
    return request.audio


def _stage(order: int, name: str, module: str, summary: str) -> PipelineStage:
    return PipelineStage(order, name, module, summary)


_UPLOAD = "Upload"
_TRANSCRIPTION = "Transcription"
_PROCESSING = "Content Processing"
_EVALUATION = "Pronunciation Evaluation"
_SYNTHESIS = "Speech Synthesis"


class PipelineOrchestrator:
    """Compose uploader, transcriber, content processor and synthesizer into flows."""

    _STAGES: Dict[Flow, Tuple[PipelineStage, ...]] = {
        Flow.TEXT_ASSIST: (
            _stage(1, _PROCESSING, "langassist.pipelines.assist.processing",
                   "Apply the requested action/tone/languages and unwrap the JSON result."),
        ),
        Flow.VOICE_ASSISTANT: (
            _stage(1, _UPLOAD, "langassist.services.storage",
                   "Push the recording to S3 and presign a fetchable URL."),
            _stage(2, _TRANSCRIPTION, "langassist.services.transcribe",
                   "Submit the URL to AssemblyAI and poll until the job settles."),
            _stage(3, _PROCESSING, "langassist.pipelines.assist.processing",
                   "Ask the teaching assistant persona to answer the learner."),
            _stage(4, _SYNTHESIS, "langassist.services.tts",
                   "Chunk the reply, fetch audio per chunk and merge it in order."),
        ),
        Flow.PRACTICE_MODE: (
            _stage(1, _UPLOAD, "langassist.services.storage",
                   "Push the recording to S3 and presign a fetchable URL."),
            _stage(2, _TRANSCRIPTION, "langassist.services.transcribe",
                   "Submit the URL to AssemblyAI and poll until the job settles."),
            _stage(3, _EVALUATION, "langassist.pipelines.assist.processing",
                   "Compare target and transcribed text, falling back to raw feedback."),
        ),
    }

    def __init__(
        self,
        *,
        uploader: AudioUploader,
        transcriber: Transcriber,
        processor: ContentProcessor,
        synthesizer: Synthesizer,
    ) -> None:
        self._uploader = uploader
        self._transcriber = transcriber
        self._processor = processor
        self._synthesizer = synthesizer

    @classmethod
    def describe(cls, flow: Flow) -> Iterable[PipelineStage]:
        """Expose the ordered list of stages for debugging and documentation."""

        return tuple(cls._STAGES[flow])

    async def run(
        self,
        request: AssistRequest,
        *,
        is_cancelled: Optional[CancellationProbe] = None,
        request_id: Optional[str] = None,
    ) -> Any:
        """Execute the flow selected by ``request.flow`` and return its JSON body.

        ``request_id`` tags every pipeline log line; a fresh one is generated
        when the caller does not supply it.
        """

        run = _FlowRun(
            flow=request.flow,
            is_cancelled=is_cancelled,
            request_id=request_id or _new_request_id(),
        )
        handlers = {
            Flow.TEXT_ASSIST: self._text_assist,
            Flow.VOICE_ASSISTANT: self._voice_assistant,
            Flow.PRACTICE_MODE: self._practice_mode,
        }
        logger.info("flow=%s request=%s started", run.flow.value, run.request_id)
        try:
            body = await handlers[request.flow](run, request)
        except PipelineCancelled:
            record_pipeline_outcome(run.flow.value, "cancelled")
            raise
        except PipelineError as exc:
            record_pipeline_outcome(run.flow.value, "error")
            logger.warning(
                "flow=%s request=%s failed %s: %s",
                run.flow.value,
                run.request_id,
                type(exc).__name__,
                exc.message,
            )
            raise
        except Exception:
            record_pipeline_outcome(run.flow.value, "error")
            logger.exception("flow=%s request=%s crashed", run.flow.value, run.request_id)
            raise

        record_pipeline_outcome(run.flow.value, "success")
        logger.info("flow=%s request=%s finished", run.flow.value, run.request_id)
        return body

    async def _in_stage(self, run: _FlowRun, name: str, operation: Callable[[], Awaitable[Any]]) -> Any:
        await run.checkpoint(name)
        started = time.perf_counter()
        logger.info("flow=%s request=%s stage=%s", run.flow.value, run.request_id, name)
        try:
            return await operation()
        finally:
            observe_stage(run.flow.value, name, time.perf_counter() - started)

    async def _upload_and_transcribe(self, run: _FlowRun, audio: AudioPayload) -> str:
        uploaded: UploadResult = await self._in_stage(
            run, _UPLOAD, lambda: self._uploader.upload(audio.data, audio.mime_type)
        )
        transcript: str = await self._in_stage(
            run, _TRANSCRIPTION, lambda: self._transcriber.transcribe(uploaded.url)
        )
        transcript_logger.info("flow=%s | request=%s | text=%s", run.flow.value, run.request_id, transcript)
        return transcript

    async def _text_assist(self, run: _FlowRun, request: AssistRequest) -> str:
        processed = await self._in_stage(
            run,
            _PROCESSING,
            lambda: self._processor.process(
                Role.CONVERSATIONAL,
                request.text,
                system_prompt=build_text_assist_prompt(request),
            ),
        )
        return processed.result

    async def _voice_assistant(self, run: _FlowRun, request: AssistRequest) -> dict[str, Any]:
        transcript = await self._upload_and_transcribe(run, _require_audio(request))
        processed = await self._in_stage(
            run, _PROCESSING, lambda: self._processor.process(Role.CONVERSATIONAL, transcript)
        )
        audio: SynthesizedAudio = await self._in_stage(
            run, _SYNTHESIS, lambda: self._synthesizer.synthesize(processed.result)
        )
        return {
            "file": {
                "data": audio.to_base64(),
                "mimeType": VOICE_RESPONSE_MIME_TYPE,
                "fileName": VOICE_RESPONSE_FILE_NAME,
            }
        }

    async def _practice_mode(self, run: _FlowRun, request: AssistRequest) -> dict[str, Any]:
        transcript = await self._upload_and_transcribe(run, _require_audio(request))
        processed = await self._in_stage(
            run, _EVALUATION, lambda: self._processor.evaluate(request.text, transcript)
        )
        return processed.evaluation.to_response()


__all__ = ["PipelineOrchestrator", "CancellationProbe"]
