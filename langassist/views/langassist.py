"""Schemas describing the `/webhook/langassist` request and response bodies."""

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class Base64AudioFile(BaseModel):
    """Audio attached to a JSON request."""

    base64: str
    mime_type: Optional[str] = Field(default=None, alias="mimeType")
    file_name: Optional[str] = Field(default=None, alias="fileName")

    model_config = {"populate_by_name": True}


class LangAssistRequest(BaseModel):
    """JSON variant of the request; multipart forms carry the same field names."""

    section: Optional[str] = None
    payload: Optional[Any] = None
    ping: Optional[Any] = None
    action: Optional[str] = None
    tone: Optional[str] = None
    input_lang: Optional[str] = Field(default=None, alias="inputLang")
    target_lang: Optional[str] = Field(default=None, alias="targetLang")
    text: Optional[str] = None
    file: Optional[Base64AudioFile] = None

    model_config = {"populate_by_name": True}


class AudioFile(BaseModel):
    data: str
    mime_type: str = Field(default="audio/mpeg", alias="mimeType")
    file_name: str = Field(default="response.mp3", alias="fileName")

    model_config = {"populate_by_name": True}


class VoiceAssistantResponse(BaseModel):
    file: AudioFile


class MistakeView(BaseModel):
    expected: Optional[str] = None
    said: Optional[str] = None
    feedback: Optional[str] = None


class PracticeModeResponse(BaseModel):
    """Evaluation body; only ``feedback`` and ``score`` are present on fallback."""

    target_text: Optional[str] = None
    pronounced_text: Optional[str] = None
    accuracy: Optional[str] = None
    mistakes: Optional[List[MistakeView]] = None
    feedback: Optional[str] = None
    score: Optional[str] = None
