"""Transcription stage backed by an OpenAI-compatible Whisper endpoint."""
from __future__ import annotations

from ...errors import ProviderError
from ...services.openai_client import OpenAICompatibleClient
from ..context import PipelineContext
from ..keys import AUDIO_DATA, LANGUAGE, RAW_TRANSCRIPTION
from ..results import StageResult
from .base import PipelineStage
from .text import word_count


class OpenAIWhisperTranscriptionStage(PipelineStage):
    """Reads ``AudioData``; writes ``RawTranscription`` and ``Language``."""

    name = "OpenAI Whisper Transcription"
    stage_type = "OpenAIWhisperTranscription"
    retry_count = 2
    retry_delay = 1.0

    def __init__(
        self,
        client: OpenAICompatibleClient,
        *,
        model: str = "whisper-1",
        language: str | None = None,
        provider: str = "OpenAI",
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.client = client
        self.model = model
        self.language = language
        self.provider = provider

    async def execute(self, ctx: PipelineContext) -> StageResult:
        metrics = self.start_metrics()
        audio = ctx.get_data(AUDIO_DATA)
        if not audio:
            return self.fail("Audio data not found in context", metrics)

        ctx.report_progress(f"Transcribing with {self.provider} Whisper...", percentage=30, stage_name=self.name)
        try:
            response = await self.client.transcribe(audio, model=self.model, language=self.language)
        except ProviderError as exc:
            metrics.add_metric("Exception", str(exc))
            return self.fail(f"{self.provider} Whisper transcription failed: {exc}", metrics)

        if not response.text.strip():
            return self.fail("Transcription returned empty result", metrics)

        ctx.set_data(RAW_TRANSCRIPTION, response.text)
        if response.language:
            ctx.set_data(LANGUAGE, response.language)

        words = word_count(response.text)
        metrics.add_metric("Provider", self.provider)
        metrics.add_metric("Model", self.model)
        metrics.add_metric("WordCount", words)
        metrics.add_metric("CharacterCount", len(response.text))

        ctx.report_progress(f"Transcribed {words} words", percentage=50, stage_name=self.name)
        return self.succeed(metrics)
