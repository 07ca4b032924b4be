"""S3 upload helpers for inbound learner audio."""

from __future__ import annotations

import logging
import mimetypes
from dataclasses import dataclass
from typing import Any
from uuid import uuid4

from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from langassist.config.settings import S3Config
from langassist.exceptions import InputError, UploadError
from langassist.services.aws import create_boto3_client

logger = logging.getLogger(__name__)

_FALLBACK_EXTENSIONS = {
    "audio/mpeg": "mp3",
    "audio/mp3": "mp3",
    "audio/webm": "webm",
    "audio/ogg": "ogg",
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/mp4": "m4a",
    "audio/x-m4a": "m4a",
}


@dataclass(frozen=True)
class UploadResult:
    """Remote location of an uploaded audio payload."""

    url: str
    object_key: str


def _extension_for(mime_type: str) -> str:
    extension = _FALLBACK_EXTENSIONS.get(mime_type)
    if extension:
        return extension
    guessed = mimetypes.guess_extension(mime_type or "")
    return guessed.lstrip(".") if guessed else "bin"


class MediaUploader:
    """Push raw audio bytes to S3 and hand back a URL the ASR can fetch."""

    def __init__(self, config: S3Config, *, client: Any | None = None) -> None:
        self._config = config
        self._client = client or create_boto3_client(
            "s3",
            region_name=config.region,
            aws_access_key_id=config.access_key,
            aws_secret_access_key=config.secret_key,
        )

    async def upload(self, audio_bytes: bytes, mime_type: str) -> UploadResult:
        """Upload once and return a presigned GET URL for the new object."""

        if not audio_bytes:
            raise InputError("Audio payload for upload was empty.")
        bucket = self._config.bucket_name
        if not bucket:
            raise UploadError("S3 bucket name is not configured.")

        prefix = self._config.key_prefix.strip("/")
        object_key = f"{prefix}/{uuid4().hex}.{_extension_for(mime_type)}"
        try:
            await run_in_threadpool(
                self._client.put_object,
                Bucket=bucket,
                Key=object_key,
                Body=audio_bytes,
                ContentType=mime_type,
            )
            url = await run_in_threadpool(
                self._client.generate_presigned_url,
                "get_object",
                Params={"Bucket": bucket, "Key": object_key},
                ExpiresIn=self._config.presigned_url_expiry_seconds,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.exception("S3 upload failed for key=%s", object_key)
            raise UploadError(f"Failed to upload audio: {exc}", cause=exc) from exc

        logger.info("Audio uploaded key=%s bytes=%s", object_key, len(audio_bytes))
        return UploadResult(url=url, object_key=object_key)


__all__ = ["MediaUploader", "UploadResult"]
