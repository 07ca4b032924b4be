"""Pydantic models for validating LLM JSON responses.

The generative model is asked for JSON but nothing enforces it, so these
parsers raise :class:`~langassist.exceptions.ParseError` on any mismatch
and leave the fallback decision to the content processor.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any, List, Optional

from pydantic import BaseModel, ValidationError, field_validator

from langassist.exceptions import ParseError

_PERCENT_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*%?\s*$")
_NUMBER_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*$")


class Mistake(BaseModel):
    expected: Optional[str] = None
    said: Optional[str] = None
    feedback: Optional[str] = None

    model_config = {"extra": "allow"}


class EvaluationResult(BaseModel):
    """Pronunciation comparison produced by the evaluator role."""

    target_text: Optional[str] = None
    pronounced_text: Optional[str] = None
    accuracy: Optional[str] = None
    mistakes: Optional[List[Mistake]] = None
    feedback: Optional[str] = None
    score: Optional[str] = None

    model_config = {"extra": "allow"}

    @field_validator("accuracy", mode="before")
    @classmethod
    def normalize_accuracy(cls, value: Any) -> Optional[str]:
        """Clamp accuracy into [0, 100] and render it as ``NN%``."""

        if value is None:
            return None
        if isinstance(value, bool):
            raise ValueError("accuracy must be a percentage")
        if isinstance(value, (int, float)):
            number = float(value)
        else:
            match = _PERCENT_RE.match(str(value))
            if not match:
                raise ValueError(f"accuracy is not a percentage: {value!r}")
            number = float(match.group(1))
        if not math.isfinite(number):
            raise ValueError(f"accuracy is not a finite number: {value!r}")
        number = max(0.0, min(100.0, number))
        return f"{number:g}%"

    @field_validator("score", mode="before")
    @classmethod
    def normalize_score(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        if isinstance(value, str):
            match = _NUMBER_RE.match(value)
            return f"{float(match.group(1)):g}/10" if match else value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return f"{value:g}/10"
        raise ValueError(f"score must be a string like 'X/10': {value!r}")

    @property
    def accuracy_value(self) -> float | None:
        if self.accuracy is None:
            return None
        return float(self.accuracy.rstrip("%"))

    @classmethod
    def fallback(cls, raw_text: str) -> "EvaluationResult":
        """Degraded result used when the model reply is not valid JSON."""

        return cls(feedback=raw_text, score="N/A")

    def to_response(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


def parse_evaluation(payload: str) -> EvaluationResult:
    """Parse the evaluator reply, raising ``ParseError`` when it does not fit."""

    data = _load_json_object(payload)
    try:
        return EvaluationResult.model_validate(data)
    except ValidationError as exc:
        raise ParseError(f"Evaluation does not match the expected schema: {exc}", payload) from exc


def parse_result_envelope(payload: str) -> str:
    """Unwrap ``{"result": ...}`` replies, raising ``ParseError`` otherwise."""

    data = _load_json_object(payload)
    if "result" not in data:
        raise ParseError("JSON reply has no 'result' field", payload)
    result = data["result"]
    if isinstance(result, str):
        return result
    return json.dumps(result, ensure_ascii=False)


def _reject_constant(name: str) -> Any:
    # NaN and Infinity cannot be rendered back into a JSON response.
    raise ValueError(f"non-standard JSON constant {name}")


def _finite_float(literal: str) -> float:
    number = float(literal)
    if not math.isfinite(number):
        raise ValueError(f"number out of range: {literal}")
    return number


def _load_json_object(payload: str) -> dict[str, Any]:
    cleaned = _clean_json_payload(payload)
    try:
        data = json.loads(
            cleaned,
            parse_constant=_reject_constant,
            parse_float=_finite_float,
        )
    except ValueError as exc:
        raise ParseError(f"Reply is not valid JSON: {exc}", payload) from exc
    if not isinstance(data, dict):
        raise ParseError("Reply is not a JSON object", payload)
    return data


def _clean_json_payload(payload: str) -> str:
    """Strip Markdown code fences around a JSON reply."""
    if not payload:
        return ""

    cleaned = payload.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]

    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]

    return cleaned.strip()


__all__ = [
    "EvaluationResult",
    "Mistake",
    "parse_evaluation",
    "parse_result_envelope",
]
