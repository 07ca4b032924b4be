"""Request ingestion helpers (first stage of every flow).

The endpoint accepts either multipart forms carrying a ``file`` upload or
JSON bodies carrying ``file.base64``. Both encodings are normalized into an
:class:`AssistRequest` before any upstream service is touched, so every
``InputError`` is raised here.
"""

from __future__ import annotations

import base64
import binascii
import json
import mimetypes
from dataclasses import dataclass, field
from typing import Any, Final, Mapping, Optional

from fastapi import Request
from pydantic import ValidationError
from starlette.datastructures import FormData, UploadFile

from langassist.exceptions import InputError
from langassist.views import LangAssistRequest

from .types import AssistRequest, AudioPayload, Flow

DEFAULT_AUDIO_TYPE: Final[str] = "audio/mpeg"

_EXTRA_AUDIO_TYPES: Final[set[str]] = {
    "video/webm",
    "video/mp4",
    "video/ogg",
    "application/octet-stream",
}

_FORM_CONTENT_TYPES: Final[tuple[str, ...]] = (
    "multipart/form-data",
    "application/x-www-form-urlencoded",
)


@dataclass
class RawSubmission:
    """Fields and optional upload exactly as the client sent them."""

    fields: Mapping[str, Any] = field(default_factory=dict)
    upload: Optional[UploadFile] = None
    form: Optional[FormData] = None

    async def close(self) -> None:
        """Release the spooled files of a multipart form."""

        if self.form is not None:
            await self.form.close()


async def read_submission(request: Request) -> RawSubmission:
    """Read a multipart/urlencoded form or a JSON body."""

    content_type = request.headers.get("content-type", "").lower()
    if content_type.startswith(_FORM_CONTENT_TYPES):
        form = await request.form()
        fields: dict[str, Any] = {}
        upload: UploadFile | None = None
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if key == "file" and upload is None:
                    upload = value
                continue
            fields[key] = value
        return RawSubmission(fields=fields, upload=upload, form=form)

    body = await request.body()
    if not body.strip():
        return RawSubmission()
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InputError("Request body is not valid JSON") from exc
    if not isinstance(payload, dict):
        raise InputError("Request body must be a JSON object")
    if is_ping(payload):
        # Connectivity probes are answered whatever else the body holds.
        return RawSubmission(fields={"ping": payload["ping"]})
    try:
        parsed = LangAssistRequest.model_validate(payload)
    except ValidationError as exc:
        raise InputError(f"Invalid request fields: {exc.error_count()} error(s)") from exc
    return RawSubmission(fields=parsed.model_dump(by_alias=True, exclude_none=True))


def is_ping(fields: Mapping[str, Any]) -> bool:
    """Connectivity probes carry a truthy ``ping`` field and nothing else matters."""

    value = fields.get("ping")
    if isinstance(value, str):
        return value.strip().lower() not in ("", "0", "false", "no", "off")
    return bool(value)


def resolve_section(fields: Mapping[str, Any]) -> Optional[str]:
    """Read the flow discriminator from ``section`` or a JSON ``payload`` field."""

    section = fields.get("section")
    if section:
        return str(section)

    payload = fields.get("payload")
    if isinstance(payload, str) and payload.strip():
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise InputError("Field 'payload' is not valid JSON") from exc
    if isinstance(payload, Mapping) and payload.get("section"):
        return str(payload["section"])
    return None


def _text_field(fields: Mapping[str, Any], name: str) -> str:
    value = fields.get(name)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def resolve_content_type(content_type: Optional[str], filename: Optional[str] = None) -> str:
    """Accept any audio MIME type, guessing from the filename when absent."""

    resolved = (content_type or "").split(";", 1)[0].strip().lower()
    if not resolved and filename:
        guessed_type, _ = mimetypes.guess_type(filename)
        resolved = guessed_type or ""
    resolved = resolved or DEFAULT_AUDIO_TYPE

    if not resolved.startswith("audio/") and resolved not in _EXTRA_AUDIO_TYPES:
        raise InputError(f"Unsupported audio type '{resolved}'")
    return resolved


def _decode_base64_audio(encoded: str) -> bytes:
    if encoded.startswith("data:") and "," in encoded:
        encoded = encoded.split(",", 1)[1]
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InputError("Audio file is not valid base64") from exc


async def read_audio(submission: RawSubmission, *, max_bytes: int) -> Optional[AudioPayload]:
    """Load the audio payload fully into memory, or ``None`` when absent."""

    if submission.upload is not None:
        upload = submission.upload
        try:
            data = await upload.read()
        finally:
            await upload.close()
        mime_type = resolve_content_type(upload.content_type, upload.filename)
    else:
        file_field = submission.fields.get("file")
        if not isinstance(file_field, Mapping) or not file_field.get("base64"):
            return None
        data = _decode_base64_audio(str(file_field["base64"]))
        mime_type = resolve_content_type(
            file_field.get("mimeType"),
            file_field.get("fileName"),
        )

    if not data:
        raise InputError("Uploaded audio file is empty")
    if len(data) > max_bytes:
        raise InputError("Uploaded audio file is too large")
    return AudioPayload(data=data, mime_type=mime_type)


async def build_assist_request(submission: RawSubmission, *, max_bytes: int) -> AssistRequest:
    """Validate the submission for its flow before any stage runs."""

    fields = submission.fields
    flow = Flow.from_section(resolve_section(fields))
    text = _text_field(fields, "text")

    if flow is Flow.TEXT_ASSIST:
        if not text.strip():
            raise InputError("No text provided")
        return AssistRequest(
            flow=flow,
            text=text,
            action=_text_field(fields, "action"),
            tone=_text_field(fields, "tone"),
            input_lang=_text_field(fields, "inputLang"),
            target_lang=_text_field(fields, "targetLang"),
        )

    audio = await read_audio(submission, max_bytes=max_bytes)
    if audio is None:
        raise InputError("No audio file provided")
    if flow is Flow.PRACTICE_MODE and not text.strip():
        raise InputError("No target text provided")
    return AssistRequest(flow=flow, text=text, audio=audio)


__all__ = [
    "RawSubmission",
    "build_assist_request",
    "is_ping",
    "read_audio",
    "read_submission",
    "resolve_content_type",
    "resolve_section",
]
