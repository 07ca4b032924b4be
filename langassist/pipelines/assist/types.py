"""Typed containers shared across the assist pipelines.

These dataclasses live in their own module so the stage modules
(`ingestion`, `prompts`, `processing`, `flow`) can import them without
creating circular dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from langassist.exceptions import InputError
from langassist.services.response_contract import EvaluationResult


class Role(str, Enum):
    """Instruction persona used for a generative-text call."""

    CONVERSATIONAL = "conversational"
    EVALUATOR = "evaluator"


class Flow(str, Enum):
    """Pipeline flows selectable through the request discriminator."""

    TEXT_ASSIST = "Text Assist"
    VOICE_ASSISTANT = "Voice Assistant"
    PRACTICE_MODE = "Practice Mode"

    @classmethod
    def from_section(cls, section: Optional[str]) -> "Flow":
        try:
            return cls((section or "").strip())
        except ValueError as exc:
            raise InputError("Unknown section") from exc


@dataclass(frozen=True)
class AudioPayload:
    """Raw inbound audio."""

    data: bytes
    mime_type: str = "audio/mpeg"


@dataclass(frozen=True)
class AssistRequest:
    """Normalized inbound request, independent of multipart vs JSON encoding."""

    flow: Flow
    text: str = ""
    action: str = ""
    tone: str = ""
    input_lang: str = ""
    target_lang: str = ""
    audio: Optional[AudioPayload] = None


@dataclass(frozen=True)
class ProcessedText:
    """Outcome of one content-processing call."""

    role: Role
    raw_text: str
    result: str
    evaluation: Optional[EvaluationResult] = None
    fallback: bool = False


@dataclass(frozen=True)
class PipelineStage:
    """Human-readable description of one stage in a flow."""

    order: int
    name: str
    module: str
    summary: str
