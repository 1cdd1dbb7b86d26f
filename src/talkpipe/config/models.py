"""Pydantic models representing the TalkPipe configuration."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ProviderSettings(BaseModel):
    """Connection settings for an OpenAI-compatible HTTP API."""

    base_url: str = Field(default="https://api.openai.com/v1", description="API root without a trailing path.")
    api_key_env: str = Field(
        default="OPENAI_API_KEY",
        description="Environment variable that stores the API key.",
    )
    transcription_model: str = Field(default="whisper-1", description="Model used for audio transcription.")
    cleaning_model: str = Field(default="gpt-4.1-nano", description="Chat model used for text cleaning.")
    timeout_seconds: float = Field(default=60.0, gt=0, description="HTTP timeout applied to provider calls.")


class HistorySettings(BaseModel):
    path: str = Field(default="~/.talkpipe/history.jsonl", description="JSON-lines file receiving saved transcriptions.")


class StageConfiguration(BaseModel):
    """Configuration for a single pipeline stage."""

    model_config = ConfigDict(extra="forbid")

    type: str = Field(..., description="Stage type identifier, e.g. AudioValidation.")
    name: str | None = Field(default=None, description="Human-readable name for this stage instance.")
    enabled: bool = True
    retry_count: int | None = Field(default=None, ge=0, description="Overrides the stage's own retry count.")
    retry_delay_seconds: float | None = Field(
        default=None, ge=0.0, description="Overrides the stage's own delay between attempts."
    )
    settings: dict[str, Any] = Field(default_factory=dict, description="Stage-specific settings.")

    @field_validator("type")
    @classmethod
    def validate_type(cls, value: str) -> str:
        if not value.strip():
            msg = "Stage type cannot be empty"
            raise ValueError(msg)
        return value.strip()


class PipelineConfiguration(BaseModel):
    name: str
    description: str = ""
    enabled: bool = True
    stages: list[StageConfiguration] = Field(default_factory=list)
    global_settings: dict[str, Any] = Field(default_factory=dict)


class AppConfig(BaseModel):
    name: str = Field(default="talkpipe-default")
    description: str = Field(default="Default dictation pipelines.")
    default_pipeline: str | None = Field(default=None, description="Pipeline used when none is requested.")
    provider: ProviderSettings = Field(default_factory=ProviderSettings)
    history: HistorySettings = Field(default_factory=HistorySettings)
    pipelines: list[PipelineConfiguration] = Field(default_factory=list)

    extras: dict[str, Any] = Field(default_factory=dict, description="Additional configuration data.")

    model_config = {
        "extra": "allow",
    }

    @model_validator(mode="after")
    def _check_pipelines(self) -> "AppConfig":
        seen: set[str] = set()
        for pipeline in self.pipelines:
            if pipeline.name in seen:
                msg = f"Duplicate pipeline name: {pipeline.name}"
                raise ValueError(msg)
            seen.add(pipeline.name)
        if self.default_pipeline is not None and self.default_pipeline not in seen:
            msg = f"default_pipeline '{self.default_pipeline}' does not match any configured pipeline"
            raise ValueError(msg)
        return self

    def get_pipeline(self, name: str) -> PipelineConfiguration | None:
        return next((pipeline for pipeline in self.pipelines if pipeline.name == name), None)
