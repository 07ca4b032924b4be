"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from langassist.config.settings import Settings, get_settings
from langassist.pipelines.assist import ContentProcessor, PipelineOrchestrator
from langassist.services import (
    BedrockLlmClient,
    MediaUploader,
    SpeechSynthesizer,
    TranscriptionClient,
)


def build_orchestrator(settings: Settings) -> PipelineOrchestrator:
    """Wire every pipeline component from its own configuration section."""

    return PipelineOrchestrator(
        uploader=MediaUploader(settings.s3),
        transcriber=TranscriptionClient(settings.assemblyai),
        processor=ContentProcessor(BedrockLlmClient(settings.bedrock)),
        synthesizer=SpeechSynthesizer(settings.tts),
    )


@lru_cache
def get_orchestrator() -> PipelineOrchestrator:
    """Return the process-wide orchestrator, built lazily on first use."""

    return build_orchestrator(get_settings())


SettingsDep = Annotated[Settings, Depends(get_settings)]
OrchestratorDep = Annotated[PipelineOrchestrator, Depends(get_orchestrator)]


__all__ = ["build_orchestrator", "get_orchestrator", "OrchestratorDep", "SettingsDep"]
