"""Pydantic schemas used as views in the MVC architecture."""

from .common import ErrorResponse, StatusResponse
from .langassist import (
    AudioFile,
    Base64AudioFile,
    LangAssistRequest,
    MistakeView,
    PracticeModeResponse,
    VoiceAssistantResponse,
)

__all__ = [
    "AudioFile",
    "Base64AudioFile",
    "ErrorResponse",
    "LangAssistRequest",
    "MistakeView",
    "PracticeModeResponse",
    "StatusResponse",
    "VoiceAssistantResponse",
]
