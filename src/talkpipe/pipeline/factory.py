"""Build pipelines from configuration through registered stage factories."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

import httpx

from ..config.models import AppConfig, HistorySettings, PipelineConfiguration, ProviderSettings, StageConfiguration
from ..errors import PipelineConfigurationError, UnknownStageTypeError
from ..services.openai_client import OpenAICompatibleClient
from .runner import Pipeline
from .stages import (
    AudioValidationStage,
    GPTTextCleaningStage,
    HistorySavingStage,
    OpenAIWhisperTranscriptionStage,
    PassThroughCleaningStage,
    PipelineStage,
)
from .stages.audio import MAX_AUDIO_BYTES

logger = logging.getLogger("talkpipe.pipeline.factory")


@dataclass(slots=True)
class PipelineBuildContext:
    """Services and settings available to stage factories."""

    provider: ProviderSettings = field(default_factory=ProviderSettings)
    history: HistorySettings = field(default_factory=HistorySettings)
    api_key: str | None = None
    http_client: httpx.AsyncClient | None = None

    @classmethod
    def from_config(cls, config: AppConfig, *, http_client: httpx.AsyncClient | None = None) -> "PipelineBuildContext":
        return cls(
            provider=config.provider,
            history=config.history,
            api_key=os.environ.get(config.provider.api_key_env),
            http_client=http_client,
        )


StageFactory = Callable[[StageConfiguration, PipelineBuildContext], PipelineStage]


def _common_options(config: StageConfiguration) -> dict[str, Any]:
    options: dict[str, Any] = {}
    if config.name:
        options["name"] = config.name
    if config.retry_count is not None:
        options["retry_count"] = config.retry_count
    if config.retry_delay_seconds is not None:
        options["retry_delay"] = config.retry_delay_seconds
    return options


def _provider_client(config: StageConfiguration, build: PipelineBuildContext) -> OpenAICompatibleClient:
    api_key = config.settings.get("api_key") or build.api_key
    if not api_key:
        raise PipelineConfigurationError(
            f"API key for stage type {config.type} not found. Set the environment variable "
            f"{build.provider.api_key_env} or provide settings.api_key."
        )
    return OpenAICompatibleClient(
        base_url=config.settings.get("base_url", build.provider.base_url),
        api_key=api_key,
        timeout_seconds=float(config.settings.get("timeout_seconds", build.provider.timeout_seconds)),
        http_client=build.http_client,
    )


def build_audio_validation(config: StageConfiguration, build: PipelineBuildContext) -> PipelineStage:
    return AudioValidationStage(
        max_bytes=int(config.settings.get("max_bytes", MAX_AUDIO_BYTES)),
        **_common_options(config),
    )


def build_whisper_transcription(config: StageConfiguration, build: PipelineBuildContext) -> PipelineStage:
    return OpenAIWhisperTranscriptionStage(
        _provider_client(config, build),
        model=config.settings.get("model", build.provider.transcription_model),
        language=config.settings.get("language"),
        provider=config.settings.get("provider", "OpenAI"),
        **_common_options(config),
    )


def build_gpt_cleaning(config: StageConfiguration, build: PipelineBuildContext) -> PipelineStage:
    options = _common_options(config)
    if "system_prompt" in config.settings:
        options["system_prompt"] = config.settings["system_prompt"]
    return GPTTextCleaningStage(
        _provider_client(config, build),
        model=config.settings.get("model", build.provider.cleaning_model),
        min_words=int(config.settings.get("min_words", 0)),
        **options,
    )


def build_pass_through(config: StageConfiguration, build: PipelineBuildContext) -> PipelineStage:
    return PassThroughCleaningStage(**_common_options(config))


def build_history_saving(config: StageConfiguration, build: PipelineBuildContext) -> PipelineStage:
    path = Path(config.settings.get("path", build.history.path)).expanduser()
    return HistorySavingStage(path, **_common_options(config))


class PipelineFactory:
    """Maps stage type identifiers to factories and assembles pipelines."""

    def __init__(self) -> None:
        self._factories: dict[str, StageFactory] = {}

    def register(self, stage_type: str, factory: StageFactory) -> None:
        if stage_type in self._factories:
            logger.warning("Stage factory for type '%s' is being overwritten", stage_type)
        self._factories[stage_type] = factory
        logger.debug("Registered stage factory for type: %s", stage_type)

    def registered_types(self) -> list[str]:
        return list(self._factories)

    def build(self, config: PipelineConfiguration, build: PipelineBuildContext) -> Pipeline:
        logger.debug("Building pipeline: %s", config.name)
        stages: list[PipelineStage] = []
        for stage_config in config.stages:
            if not stage_config.enabled:
                continue
            factory = self._factories.get(stage_config.type)
            if factory is None:
                raise UnknownStageTypeError(stage_config.type, self._factories)
            try:
                stage = factory(stage_config, build)
            except (ValueError, TypeError) as exc:
                raise PipelineConfigurationError(
                    f"Invalid settings for stage type {stage_config.type} in pipeline '{config.name}': {exc}"
                ) from exc
            stages.append(stage)
            logger.debug("  Added stage: %s (type: %s)", stage.name, stage_config.type)

        if not stages:
            raise PipelineConfigurationError(f"Pipeline '{config.name}' has no enabled stages")
        return Pipeline(stages=stages, name=config.name)


def default_factory() -> PipelineFactory:
    factory = PipelineFactory()
    factory.register(AudioValidationStage.stage_type, build_audio_validation)
    factory.register(OpenAIWhisperTranscriptionStage.stage_type, build_whisper_transcription)
    factory.register(GPTTextCleaningStage.stage_type, build_gpt_cleaning)
    factory.register(PassThroughCleaningStage.stage_type, build_pass_through)
    factory.register(HistorySavingStage.stage_type, build_history_saving)
    return factory
