"""Configuration sections are immutable once loaded."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from langassist.config.settings import (
    AssemblyAIConfig,
    BedrockConfig,
    S3Config,
    Settings,
    TtsConfig,
)


@pytest.mark.parametrize(
    ("section", "field_name", "value"),
    [
        (S3Config(), "bucket_name", "other-bucket"),
        (AssemblyAIConfig(), "max_poll_attempts", 1),
        (BedrockConfig(), "model_id", "other-model"),
        (TtsConfig(), "max_chunk_length", 10),
    ],
)
def test_sections_reject_mutation(section, field_name: str, value) -> None:
    before = getattr(section, field_name)

    with pytest.raises(ValidationError):
        setattr(section, field_name, value)

    assert getattr(section, field_name) == before


def test_nested_sections_stay_frozen() -> None:
    settings = Settings()

    with pytest.raises(ValidationError):
        settings.port = 8080
    with pytest.raises(ValidationError):
        settings.assemblyai.poll_interval_seconds = 0.0

    assert settings.assemblyai.poll_interval_seconds == 2.0


def test_poll_defaults() -> None:
    config = AssemblyAIConfig()

    assert config.poll_interval_seconds == 2.0
    assert config.max_poll_attempts == 30
    assert TtsConfig().max_chunk_length == 180
