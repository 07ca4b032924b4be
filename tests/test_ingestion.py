"""Field normalisation for multipart and JSON submissions."""

from __future__ import annotations

import asyncio
import base64

import pytest

from langassist.exceptions import InputError
from langassist.pipelines.assist.ingestion import (
    RawSubmission,
    build_assist_request,
    is_ping,
    resolve_content_type,
    resolve_section,
)
from langassist.pipelines.assist.types import Flow


@pytest.mark.parametrize(
    ("value", "expected"),
    [(True, True), ("true", True), ("1", True), ("false", False), ("", False), (None, False), (False, False)],
)
def test_is_ping(value, expected) -> None:
    assert is_ping({"ping": value}) is expected


def test_section_prefers_explicit_field() -> None:
    fields = {"section": "Practice Mode", "payload": '{"section": "Text Assist"}'}

    assert resolve_section(fields) == "Practice Mode"


def test_section_from_json_payload_string_or_object() -> None:
    assert resolve_section({"payload": '{"section": "Voice Assistant"}'}) == "Voice Assistant"
    assert resolve_section({"payload": {"section": "Text Assist"}}) == "Text Assist"
    assert resolve_section({}) is None


def test_malformed_payload_field_is_input_error() -> None:
    with pytest.raises(InputError):
        resolve_section({"payload": "{section"})


@pytest.mark.parametrize(
    ("content_type", "filename", "expected"),
    [
        ("audio/webm;codecs=opus", None, "audio/webm"),
        ("video/webm", None, "video/webm"),
        (None, "clip.ogg", "audio/ogg"),
        (None, None, "audio/mpeg"),
    ],
)
def test_resolve_content_type(content_type, filename, expected) -> None:
    assert resolve_content_type(content_type, filename) == expected


def test_non_audio_content_type_is_rejected() -> None:
    with pytest.raises(InputError):
        resolve_content_type("image/png")


def test_json_audio_is_decoded() -> None:
    encoded = base64.b64encode(b"RIFF....WAVE").decode("ascii")
    submission = RawSubmission(
        fields={"section": "Practice Mode", "text": "good morning", "file": {"base64": encoded, "mimeType": "audio/wav"}}
    )

    request = asyncio.run(build_assist_request(submission, max_bytes=1024))

    assert request.flow is Flow.PRACTICE_MODE
    assert request.text == "good morning"
    assert request.audio.data == b"RIFF....WAVE"
    assert request.audio.mime_type == "audio/wav"


def test_invalid_base64_is_input_error() -> None:
    submission = RawSubmission(fields={"section": "Voice Assistant", "file": {"base64": "not base64!!"}})

    with pytest.raises(InputError, match="base64"):
        asyncio.run(build_assist_request(submission, max_bytes=1024))


def test_oversized_audio_is_rejected() -> None:
    encoded = base64.b64encode(b"x" * 32).decode("ascii")
    submission = RawSubmission(fields={"section": "Voice Assistant", "file": {"base64": encoded}})

    with pytest.raises(InputError, match="too large"):
        asyncio.run(build_assist_request(submission, max_bytes=16))


class FakeUpload:
    def __init__(self, data: bytes, content_type: str = "audio/webm", filename: str = "clip.webm") -> None:
        self.data = data
        self.content_type = content_type
        self.filename = filename
        self.closed = False

    async def read(self) -> bytes:
        return self.data

    async def close(self) -> None:
        self.closed = True


class FakeForm:
    def __init__(self) -> None:
        self.closed = False

    async def close(self) -> None:
        self.closed = True


def test_upload_is_closed_even_when_rejected() -> None:
    upload = FakeUpload(b"")
    submission = RawSubmission(fields={"section": "Voice Assistant"}, upload=upload)

    with pytest.raises(InputError, match="empty"):
        asyncio.run(build_assist_request(submission, max_bytes=1024))

    assert upload.closed is True


def test_upload_is_closed_after_read() -> None:
    upload = FakeUpload(b"webm-bytes")
    submission = RawSubmission(fields={"section": "Voice Assistant"}, upload=upload)

    request = asyncio.run(build_assist_request(submission, max_bytes=1024))

    assert request.audio.data == b"webm-bytes"
    assert upload.closed is True


def test_submission_close_releases_form() -> None:
    form = FakeForm()

    asyncio.run(RawSubmission(fields={"ping": "true"}, form=form).close())
    asyncio.run(RawSubmission().close())

    assert form.closed is True
