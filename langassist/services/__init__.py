"""Service layer helpers for external integrations."""

from .llm_client import BedrockLlmClient
from .response_contract import (
    EvaluationResult,
    Mistake,
    parse_evaluation,
    parse_result_envelope,
)
from .storage import MediaUploader, UploadResult
from .transcribe import TranscriptionClient, TranscriptionJob, TranscriptStatus
from .tts import (
    SpeechSynthesizer,
    SynthesisChunk,
    SynthesizedAudio,
    chunk_text,
)

__all__ = [
    "BedrockLlmClient",
    "EvaluationResult",
    "Mistake",
    "parse_evaluation",
    "parse_result_envelope",
    "MediaUploader",
    "UploadResult",
    "TranscriptionClient",
    "TranscriptionJob",
    "TranscriptStatus",
    "SpeechSynthesizer",
    "SynthesisChunk",
    "SynthesizedAudio",
    "chunk_text",
]
