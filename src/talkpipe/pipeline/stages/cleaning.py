"""Text cleaning stages."""
from __future__ import annotations

from ...errors import ProviderError
from ...services.openai_client import OpenAICompatibleClient
from ..context import PipelineContext
from ..keys import CLEANED_TEXT, RAW_TRANSCRIPTION, TEXT_CLEANING_SKIPPED, WINDOW_CONTEXT
from ..results import StageResult
from .base import PipelineStage
from .text import word_count

DEFAULT_CLEANING_PROMPT = (
    "You clean up dictated text. Fix punctuation, capitalisation and obvious transcription "
    "mistakes, and remove filler words such as 'um' and 'uh'. Keep the speaker's wording and "
    "language. Reply with the cleaned text only, without commentary or quotes."
)


class PassThroughCleaningStage(PipelineStage):
    """Copies ``RawTranscription`` to ``CleanedText`` unchanged."""

    name = "Pass Through (No Cleaning)"
    stage_type = "PassThroughCleaning"

    async def execute(self, ctx: PipelineContext) -> StageResult:
        metrics = self.start_metrics()
        raw_text = ctx.get_data(RAW_TRANSCRIPTION)
        if not raw_text or not raw_text.strip():
            return self.fail("Raw transcription not found in context", metrics)

        ctx.set_data(CLEANED_TEXT, raw_text)
        metrics.add_metric("WordCount", word_count(raw_text))
        metrics.add_metric("CharacterCount", len(raw_text))
        metrics.add_metric("Modified", False)

        ctx.report_progress("Text ready (no cleaning)", percentage=90, stage_name=self.name)
        return self.succeed(metrics)


class GPTTextCleaningStage(PipelineStage):
    """Cleans ``RawTranscription`` with a chat model and writes ``CleanedText``.

    Utterances shorter than ``min_words`` are copied through untouched and
    ``TextCleaningSkipped`` is set so later stages can tell the difference.
    ``WindowContext``, when present, is passed to the model as a hint about
    where the text will be pasted. A pipeline-wide ``Tone`` setting is added
    to the system prompt as a style instruction.
    """

    name = "GPT Text Cleaning"
    stage_type = "GPTTextCleaning"
    retry_count = 1
    retry_delay = 1.0

    def __init__(
        self,
        client: OpenAICompatibleClient,
        *,
        model: str = "gpt-4.1-nano",
        system_prompt: str = DEFAULT_CLEANING_PROMPT,
        min_words: int = 0,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.client = client
        self.model = model
        self.system_prompt = system_prompt
        self.min_words = min_words

    async def execute(self, ctx: PipelineContext) -> StageResult:
        metrics = self.start_metrics()
        raw_text = ctx.get_data(RAW_TRANSCRIPTION)
        if not raw_text or not raw_text.strip():
            return self.fail("Raw transcription not found in context", metrics)

        before = word_count(raw_text)
        if before < self.min_words:
            ctx.set_data(CLEANED_TEXT, raw_text)
            ctx.set_data(TEXT_CLEANING_SKIPPED, True)
            metrics.add_metric("Skipped", True)
            metrics.add_metric("BeforeWordCount", before)
            return self.succeed(metrics)

        system_prompt = self.system_prompt
        window_context = ctx.get_data(WINDOW_CONTEXT)
        if window_context:
            system_prompt += f"\nThe text will be pasted into: {window_context}. Match its tone."
        tone = ctx.get_setting("Tone", str)
        if tone:
            system_prompt += f"\nUse a {tone} tone."

        ctx.report_progress("Cleaning text with GPT...", percentage=70, stage_name=self.name)
        try:
            cleaned = await self.client.complete(model=self.model, system_prompt=system_prompt, user_prompt=raw_text)
        except ProviderError as exc:
            metrics.add_metric("Exception", str(exc))
            return self.fail(f"GPT text cleaning failed: {exc}", metrics)

        if not cleaned:
            return self.fail("Text cleaning returned empty result", metrics)

        ctx.set_data(CLEANED_TEXT, cleaned)
        ctx.set_data(TEXT_CLEANING_SKIPPED, False)

        after = word_count(cleaned)
        metrics.add_metric("Model", self.model)
        metrics.add_metric("BeforeWordCount", before)
        metrics.add_metric("AfterWordCount", after)
        metrics.add_metric("WordCountChange", after - before)
        metrics.add_metric("BeforeLength", len(raw_text))
        metrics.add_metric("AfterLength", len(cleaned))

        ctx.report_progress(f"Cleaned {after} words", percentage=90, stage_name=self.name)
        return self.succeed(metrics)
