"""Thin Bedrock client wrapper for generative text invocations."""

from __future__ import annotations

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from langassist.config.settings import BedrockConfig
from langassist.exceptions import UpstreamError
from langassist.services.aws import create_boto3_client, decode_api_key

logger = logging.getLogger(__name__)


class BedrockLlmClient:
    """Invoke Amazon Bedrock models with standard configuration."""

    def __init__(self, config: BedrockConfig, *, client: Any | None = None) -> None:
        self._config = config

        if client is not None:
            self._client = client
            return

        api_key_tuple = None
        if config.api_key:
            api_key_tuple = decode_api_key(config.api_key.get_secret_value())

        self._client = create_boto3_client(
            "bedrock-runtime",
            region_name=config.region,
            aws_access_key_id=api_key_tuple[0] if api_key_tuple else None,
            aws_secret_access_key=api_key_tuple[1] if api_key_tuple else None,
        )

    async def invoke(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        """Run a Bedrock `converse` call and return the aggregate text output."""

        inference_cfg = {
            "maxTokens": max_tokens or self._config.max_tokens,
            "temperature": (
                temperature
                if temperature is not None
                else self._config.temperature
            ),
            "topP": self._config.top_p,
        }

        def _call() -> str:
            response = self._client.converse(
                modelId=self._config.model_id,
                system=[{"text": system_prompt}],
                messages=[{"role": "user", "content": [{"text": user_prompt}]}],
                inferenceConfig=inference_cfg,
            )
            content_blocks = (
                response.get("output", {})
                .get("message", {})
                .get("content", [])
            )
            texts = [block.get("text", "") for block in content_blocks if block.get("text")]
            return "\n".join(texts).strip()

        try:
            result = await run_in_threadpool(_call)
        except (BotoCoreError, ClientError) as exc:
            logger.exception("Bedrock invocation failed model=%s", self._config.model_id)
            raise UpstreamError(f"Failed to process text: {exc}", cause=exc) from exc

        if not result:
            raise UpstreamError("Language model returned an empty response")
        return result


__all__ = ["BedrockLlmClient"]
