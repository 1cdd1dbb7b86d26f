"""High-level entry point turning raw audio into text through a pipeline."""
from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict

from .cancellation import CancellationToken
from .context import PipelineContext
from .keys import AUDIO_DATA, AUDIO_DURATION, CLEANED_TEXT, LANGUAGE, RAW_TRANSCRIPTION, WINDOW_CONTEXT
from .metrics import PipelineMetrics
from .progress import ProgressSink
from .registry import PipelineRegistry
from .runner import Pipeline
from .results import PipelineResult
from .stages.text import word_count


class TranscriptionResult(BaseModel):
    """A :class:`PipelineResult` plus the text extracted from the final context."""

    model_config = ConfigDict(frozen=True)

    pipeline: PipelineResult
    text: str = ""
    language: str | None = None
    duration_seconds: float | None = None
    word_count: int = 0

    @property
    def is_success(self) -> bool:
        return self.pipeline.is_success

    @property
    def error_message(self) -> str | None:
        return self.pipeline.error_message


def _failed(message: str, pipeline_name: str = "") -> TranscriptionResult:
    return TranscriptionResult(
        pipeline=PipelineResult(
            is_success=False,
            error_message=message,
            metrics=PipelineMetrics(pipeline_name=pipeline_name),
        )
    )


def extract_result(result: PipelineResult, ctx: PipelineContext) -> TranscriptionResult:
    if not result.is_success:
        return TranscriptionResult(pipeline=result)

    text = ctx.get_data(CLEANED_TEXT) or ctx.get_data(RAW_TRANSCRIPTION) or ""
    words = word_count(text)
    metrics = result.metrics.model_copy(deep=True)
    metrics.set_global_metric("TotalWordCount", words)
    return TranscriptionResult(
        pipeline=result.model_copy(update={"metrics": metrics}),
        text=text,
        language=ctx.get_data(LANGUAGE),
        duration_seconds=ctx.get_data(AUDIO_DURATION),
        word_count=words,
    )


class PipelineService:
    """Seeds a fresh context from audio bytes and runs a registered pipeline."""

    def __init__(self, registry: PipelineRegistry) -> None:
        self.registry = registry
        self.logger = logging.getLogger("talkpipe.pipeline.service")

    async def execute(
        self,
        audio_data: bytes,
        *,
        pipeline_name: str | None = None,
        window_context: str | None = None,
        progress: ProgressSink | None = None,
        cancellation: CancellationToken | None = None,
    ) -> TranscriptionResult:
        name = pipeline_name or self.registry.default_name
        if name is None:
            self.logger.error("No default pipeline configured")
            return _failed("No default pipeline configured. Please configure a pipeline.")

        pipeline = self.registry.get_pipeline(name)
        if pipeline is None:
            if name in self.registry.available_names():
                return _failed(f"Pipeline '{name}' could not be built; check its configuration", name)
            return _failed(f"Pipeline '{name}' not found", name)

        return await self.execute_pipeline(
            pipeline,
            audio_data,
            window_context=window_context,
            progress=progress,
            cancellation=cancellation,
        )

    async def execute_pipeline(
        self,
        pipeline: Pipeline,
        audio_data: bytes,
        *,
        window_context: str | None = None,
        progress: ProgressSink | None = None,
        cancellation: CancellationToken | None = None,
    ) -> TranscriptionResult:
        ctx = PipelineContext(progress=progress, cancellation=cancellation or CancellationToken())
        ctx.set_data(AUDIO_DATA, bytes(audio_data))
        if window_context:
            ctx.set_data(WINDOW_CONTEXT, window_context)
        config = self.registry.config
        if config is not None:
            pipeline_config = config.get_pipeline(pipeline.name)
            if pipeline_config is not None:
                ctx.settings.update(pipeline_config.global_settings)

        self.logger.info("Executing pipeline: %s", pipeline.name)
        result = await pipeline.execute(ctx)
        self.logger.info(
            "Pipeline '%s' completed: success=%s, duration=%.2fms",
            pipeline.name,
            result.is_success,
            result.metrics.total_duration_ms or 0.0,
        )
        return extract_result(result, ctx)
