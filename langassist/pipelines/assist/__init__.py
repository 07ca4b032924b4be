"""Assist pipeline package.

Modules are organised by the order in which `/webhook/langassist` executes:

1. `ingestion` – normalize multipart/JSON submissions and validate fields.
2. `prompts` – role prompts for the conversational, text-assist and evaluator personas.
3. `processing` – call the language model and apply the parse-or-fallback policy.
4. `flow` – the orchestrator chaining upload, transcription, processing and synthesis.

The upstream adapters themselves live in `langassist.services`.
"""

from .flow import CancellationProbe, PipelineOrchestrator
from .ingestion import (
    RawSubmission,
    build_assist_request,
    is_ping,
    read_submission,
    resolve_content_type,
)
from .processing import ContentProcessor
from .prompts import build_evaluation_prompt, build_text_assist_prompt
from .types import AssistRequest, AudioPayload, Flow, PipelineStage, ProcessedText, Role

__all__ = [
    "AssistRequest",
    "AudioPayload",
    "CancellationProbe",
    "ContentProcessor",
    "Flow",
    "PipelineOrchestrator",
    "PipelineStage",
    "ProcessedText",
    "RawSubmission",
    "Role",
    "build_assist_request",
    "build_evaluation_prompt",
    "build_text_assist_prompt",
    "is_ping",
    "read_submission",
    "resolve_content_type",
]
