"""Chunked text-to-speech against the Google Translate TTS endpoint.

The endpoint only accepts short utterances, so replies are split on word
boundaries, fetched one chunk at a time and glued back together in order.
MP3 frames concatenate cleanly, so no re-encoding happens between chunks.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass, field
from typing import List

import httpx

from langassist.config.settings import TtsConfig
from langassist.exceptions import UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHUNK_LENGTH = 180


@dataclass
class SynthesisChunk:
    """One word-aligned fragment of the text to synthesize."""

    index: int
    text: str
    audio: bytes | None = None


@dataclass(frozen=True)
class SynthesizedAudio:
    """Merged audio for every chunk, in chunk order."""

    data: bytes
    mime_type: str = "audio/mpeg"
    chunk_sizes: tuple[int, ...] = field(default_factory=tuple)

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")


def chunk_text(text: str, max_length: int = DEFAULT_MAX_CHUNK_LENGTH) -> List[SynthesisChunk]:
    """Greedily split ``text`` into trimmed chunks of at most ``max_length`` chars.

    Splits only happen on whitespace. A single word longer than
    ``max_length`` cannot be placed on a boundary and is cut at the limit.
    """

    if max_length < 1:
        raise ValueError("max_length must be positive")

    chunks: List[SynthesisChunk] = []
    length = len(text)
    start = 0
    while start < length:
        while start < length and text[start].isspace():
            start += 1
        if start >= length:
            break

        end = start + max_length
        if end >= length:
            piece = text[start:]
            start = length
        elif text[end].isspace():
            piece = text[start:end]
            start = end
        else:
            split = end - 1
            while split > start and not text[split].isspace():
                split -= 1
            if split > start:
                piece = text[start:split]
                start = split
            else:
                piece = text[start:end]
                start = end

        piece = piece.strip()
        if piece:
            chunks.append(SynthesisChunk(index=len(chunks), text=piece))
    return chunks


class SpeechSynthesizer:
    """Synthesize arbitrary-length text by fetching and merging chunk audio."""

    def __init__(self, config: TtsConfig, *, http_client: httpx.AsyncClient | None = None) -> None:
        self._config = config
        self._http_client = http_client

    async def synthesize(self, text: str) -> SynthesizedAudio:
        chunks = chunk_text(text, self._config.max_chunk_length)
        if not chunks:
            raise UpstreamError("Nothing to synthesize")

        if self._http_client is not None:
            await self._fetch_all(self._http_client, chunks)
        else:
            async with httpx.AsyncClient(timeout=self._config.request_timeout_seconds) as client:
                await self._fetch_all(client, chunks)

        merged = b"".join(chunk.audio or b"" for chunk in chunks)
        logger.info("Synthesized %s chunk(s) into %s bytes", len(chunks), len(merged))
        return SynthesizedAudio(
            data=merged,
            chunk_sizes=tuple(len(chunk.audio or b"") for chunk in chunks),
        )

    async def _fetch_all(self, client: httpx.AsyncClient, chunks: List[SynthesisChunk]) -> None:
        # Sequential on purpose: chunk order is the audio order.
        for chunk in chunks:
            chunk.audio = await self._fetch_chunk(client, chunk)

    async def _fetch_chunk(self, client: httpx.AsyncClient, chunk: SynthesisChunk) -> bytes:
        params = {
            "ie": "UTF-8",
            "q": chunk.text,
            "tl": self._config.language,
            "client": self._config.client,
        }
        try:
            response = await client.get(self._config.endpoint, params=params)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.exception("TTS request failed chunk=%s", chunk.index)
            raise UpstreamError(f"Speech synthesis failed: {exc}", cause=exc) from exc

        if not response.content:
            raise UpstreamError(f"Speech synthesis returned no audio for chunk {chunk.index}")
        return response.content


__all__ = [
    "DEFAULT_MAX_CHUNK_LENGTH",
    "SpeechSynthesizer",
    "SynthesisChunk",
    "SynthesizedAudio",
    "chunk_text",
]
