"""Generative-text stage shared by all three flows."""

from __future__ import annotations

import logging
from typing import Protocol

from langassist.exceptions import ParseError, UpstreamError
from langassist.services.response_contract import (
    EvaluationResult,
    parse_evaluation,
    parse_result_envelope,
)

from .prompts import DEFAULT_PROMPTS, build_evaluation_input, build_evaluation_prompt
from .types import ProcessedText, Role

logger = logging.getLogger("langassist.pipeline")


class TextGenerator(Protocol):
    async def invoke(self, *, system_prompt: str, user_prompt: str) -> str: ...


def _truncate(value: str, max_length: int = 500) -> str:
    if len(value) <= max_length:
        return value
    return value[: max_length - 3] + "..."


class ContentProcessor:
    """Send text to the language model under a role prompt and parse the reply.

    The model is asked for structured output but may ignore the request.
    Unparseable replies are never an error: they go through the explicit
    fallback branches below and come back flagged with ``fallback=True``.
    """

    def __init__(self, llm: TextGenerator) -> None:
        self._llm = llm

    async def process(
        self,
        role: Role,
        text: str,
        *,
        system_prompt: str | None = None,
    ) -> ProcessedText:
        prompt = system_prompt or DEFAULT_PROMPTS[role]
        raw_text = await self._llm.invoke(system_prompt=prompt, user_prompt=text)
        if not raw_text or not raw_text.strip():
            raise UpstreamError("Language model returned an empty response")

        logger.info("LLM reply role=%s: %s", role.value, _truncate(raw_text))

        if role is Role.EVALUATOR:
            return self._parse_evaluation(raw_text)
        return self._parse_conversational(raw_text)

    async def evaluate(self, target_text: str, pronounced_text: str) -> ProcessedText:
        """Compare the expected phrase with what the learner actually said."""

        return await self.process(
            Role.EVALUATOR,
            build_evaluation_input(target_text, pronounced_text),
            system_prompt=build_evaluation_prompt(target_text, pronounced_text),
        )

    @staticmethod
    def _parse_conversational(raw_text: str) -> ProcessedText:
        try:
            result = parse_result_envelope(raw_text)
        except ParseError:
            # Fallback: plain prose is the expected shape for this role.
            return ProcessedText(
                role=Role.CONVERSATIONAL,
                raw_text=raw_text,
                result=raw_text.strip(),
                fallback=True,
            )
        return ProcessedText(role=Role.CONVERSATIONAL, raw_text=raw_text, result=result)

    @staticmethod
    def _parse_evaluation(raw_text: str) -> ProcessedText:
        try:
            evaluation = parse_evaluation(raw_text)
        except ParseError as exc:
            # Fallback: hand the raw reply back as feedback with no score.
            logger.warning("Evaluation reply is not valid JSON, falling back to raw text: %s", exc)
            return ProcessedText(
                role=Role.EVALUATOR,
                raw_text=raw_text,
                result=raw_text,
                evaluation=EvaluationResult.fallback(raw_text),
                fallback=True,
            )
        return ProcessedText(
            role=Role.EVALUATOR,
            raw_text=raw_text,
            result=evaluation.feedback or "",
            evaluation=evaluation,
        )


__all__ = ["ContentProcessor", "TextGenerator"]
