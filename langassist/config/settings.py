from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class S3Config(BaseSettings):
    """S3 configuration for inbound audio uploads"""

    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    region: str = "us-east-1"
    bucket_name: str = "langassist-audio"
    key_prefix: str = "uploads"
    presigned_url_expiry_seconds: int = Field(default=3600, ge=60, le=604800)

    model_config = SettingsConfigDict(
        env_prefix="S3_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )


class AssemblyAIConfig(BaseSettings):
    """AssemblyAI transcription configuration."""

    api_key: SecretStr = Field(default=SecretStr(""))
    base_url: str = "https://api.assemblyai.com/v2"
    poll_interval_seconds: float = Field(default=2.0, ge=0.0)
    max_poll_attempts: int = Field(default=30, ge=1)
    request_timeout_seconds: float = Field(default=30.0, gt=0.0)

    model_config = SettingsConfigDict(
        env_prefix="ASSEMBLYAI_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )


class BedrockConfig(BaseSettings):
    """Amazon Bedrock configuration."""

    region: str = Field(
        default="us-east-1",
        validation_alias="BEDROCK_REGION",
    )
    model_id: str = Field(
        default="amazon.nova-micro-v1:0",
        validation_alias="BEDROCK_MODEL_ID",
    )
    max_tokens: int = Field(
        default=1024,
        validation_alias="BEDROCK_MAX_TOKENS",
        ge=1,
        le=4096,
    )
    temperature: float = Field(
        default=0.3,
        validation_alias="BEDROCK_TEMPERATURE",
        ge=0.0,
        le=1.0,
    )
    top_p: float = Field(
        default=0.9,
        validation_alias="BEDROCK_TOP_P",
        ge=0.0,
        le=1.0,
    )
    api_key: SecretStr | None = Field(
        default=None,
        validation_alias="BEDROCK_API_KEY",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )


class TtsConfig(BaseSettings):
    """Chunked text-to-speech endpoint configuration."""

    endpoint: str = "https://translate.google.com/translate_tts"
    language: str = "en"
    client: str = "tw-ob"
    max_chunk_length: int = Field(default=180, ge=1, le=200)
    request_timeout_seconds: float = Field(default=15.0, gt=0.0)

    model_config = SettingsConfigDict(
        env_prefix="TTS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "LangAssist Backend"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3000
    log_file: str = "logs/app.log"
    pipeline_log_file: str = "logs/pipeline.log"
    transcript_log_file: str = "logs/transcripts.log"
    max_request_bytes: int = Field(default=50 * 1024 * 1024, ge=1)

    # S3
    s3: S3Config = Field(default_factory=S3Config)

    # AssemblyAI
    assemblyai: AssemblyAIConfig = Field(default_factory=AssemblyAIConfig)

    # Bedrock
    bedrock: BedrockConfig = Field(default_factory=BedrockConfig)

    # TTS
    tts: TtsConfig = Field(default_factory=TtsConfig)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["GET", "POST", "OPTIONS"]
    cors_allow_headers: list[str] = ["Content-Type", "x-api-key"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )


@lru_cache
def get_settings() -> Settings:
    """Build the settings tree once per process."""

    return Settings()
