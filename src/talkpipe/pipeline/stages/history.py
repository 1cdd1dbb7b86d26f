"""Stage that appends finished transcriptions to a JSON-lines history file."""
from __future__ import annotations

import asyncio
import json
from pathlib import Path

from ..context import PipelineContext
from ..keys import AUDIO_DURATION, CLEANED_TEXT, RAW_TRANSCRIPTION
from ..metrics import utcnow
from ..results import StageResult
from .base import PipelineStage


class HistorySavingStage(PipelineStage):
    """Saves raw and cleaned text; never fails the pipeline.

    Place at the end of a pipeline, after text cleaning.
    """

    name = "Save to History"
    stage_type = "HistorySaving"

    def __init__(self, path: Path, **kwargs) -> None:
        super().__init__(**kwargs)
        self.path = path

    async def execute(self, ctx: PipelineContext) -> StageResult:
        metrics = self.start_metrics()
        raw_text = ctx.get_data(RAW_TRANSCRIPTION, default="")
        cleaned_text = ctx.get_data(CLEANED_TEXT) or raw_text
        duration = ctx.get_data(AUDIO_DURATION, default=0.0)

        if not raw_text.strip() and not cleaned_text.strip():
            metrics.add_metric("Saved", False)
            metrics.add_metric("Reason", "No text to save")
            return self.succeed(metrics)

        entry = {
            "timestamp": utcnow().isoformat(),
            "raw_text": raw_text,
            "cleaned_text": cleaned_text,
            "duration_seconds": duration,
        }
        try:
            await asyncio.to_thread(self._append, entry)
        except OSError as exc:
            self.logger.warning("Could not save transcription history to %s: %s", self.path, exc)
            metrics.add_metric("Saved", False)
            metrics.add_metric("Error", str(exc))
            return self.succeed(metrics)

        metrics.add_metric("Saved", True)
        metrics.add_metric("RawLength", len(raw_text))
        metrics.add_metric("CleanedLength", len(cleaned_text))
        return self.succeed(metrics)

    def _append(self, entry: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(entry, ensure_ascii=False) + "\n")
