"""Shared fakes for the upstream boundaries of the assist pipelines."""

from __future__ import annotations

from pathlib import Path
import sys
from typing import Iterable

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from langassist.exceptions import UploadError  # noqa: E402
from langassist.pipelines.assist import ContentProcessor, PipelineOrchestrator  # noqa: E402
from langassist.services.storage import UploadResult  # noqa: E402
from langassist.services.tts import SynthesizedAudio  # noqa: E402


class FakeUploader:
    def __init__(self, *, fail: bool = False, calls: list[str] | None = None) -> None:
        self.fail = fail
        self.uploads: list[tuple[bytes, str]] = []
        self.calls = calls if calls is not None else []

    async def upload(self, audio_bytes: bytes, mime_type: str) -> UploadResult:
        self.calls.append("upload")
        self.uploads.append((audio_bytes, mime_type))
        if self.fail:
            raise UploadError("Failed to upload audio: boom")
        return UploadResult(url="https://bucket.example.com/uploads/a.mp3", object_key="uploads/a.mp3")


class FakeTranscriber:
    def __init__(self, text: str = "hello word", *, error: Exception | None = None, calls: list[str] | None = None) -> None:
        self.text = text
        self.error = error
        self.urls: list[str] = []
        self.calls = calls if calls is not None else []

    async def transcribe(self, audio_url: str) -> str:
        self.calls.append("transcribe")
        self.urls.append(audio_url)
        if self.error is not None:
            raise self.error
        return self.text


class FakeLlm:
    """Returns canned replies in order and records every prompt it was given."""

    def __init__(self, replies: Iterable[str] | str, *, calls: list[str] | None = None) -> None:
        self.replies = [replies] if isinstance(replies, str) else list(replies)
        self.prompts: list[tuple[str, str]] = []
        self.calls = calls if calls is not None else []

    async def invoke(self, *, system_prompt: str, user_prompt: str) -> str:
        self.calls.append("llm")
        self.prompts.append((system_prompt, user_prompt))
        return self.replies[min(len(self.prompts) - 1, len(self.replies) - 1)]


class FakeSynthesizer:
    def __init__(self, audio: bytes = b"ID3-fake-mp3", *, calls: list[str] | None = None) -> None:
        self.audio = audio
        self.texts: list[str] = []
        self.calls = calls if calls is not None else []

    async def synthesize(self, text: str) -> SynthesizedAudio:
        self.calls.append("synthesize")
        self.texts.append(text)
        return SynthesizedAudio(data=self.audio, chunk_sizes=(len(self.audio),))


def build_fake_orchestrator(
    *,
    llm_replies: Iterable[str] | str = "Great question!",
    transcript: str = "hello word",
    uploader: FakeUploader | None = None,
    transcriber: FakeTranscriber | None = None,
    synthesizer: FakeSynthesizer | None = None,
    calls: list[str] | None = None,
) -> tuple[PipelineOrchestrator, dict[str, object]]:
    calls = calls if calls is not None else []
    parts = {
        "uploader": uploader or FakeUploader(calls=calls),
        "transcriber": transcriber or FakeTranscriber(transcript, calls=calls),
        "llm": FakeLlm(llm_replies, calls=calls),
        "synthesizer": synthesizer or FakeSynthesizer(calls=calls),
        "calls": calls,
    }
    orchestrator = PipelineOrchestrator(
        uploader=parts["uploader"],  # type: ignore[arg-type]
        transcriber=parts["transcriber"],  # type: ignore[arg-type]
        processor=ContentProcessor(parts["llm"]),  # type: ignore[arg-type]
        synthesizer=parts["synthesizer"],  # type: ignore[arg-type]
    )
    return orchestrator, parts


@pytest.fixture
def evaluator_reply() -> str:
    return (
        '{"accuracy":"90%","mistakes":[{"expected":"world","said":"word",'
        '"feedback":"final consonant dropped"}],"feedback":"Good attempt","score":"9/10"}'
    )
