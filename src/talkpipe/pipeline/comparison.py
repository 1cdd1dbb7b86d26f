"""Run several pipelines over the same audio and compare the outcomes."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Sequence

from .context import PipelineContext
from .keys import AUDIO_DATA
from .runner import Pipeline
from .service import TranscriptionResult, extract_result

logger = logging.getLogger("talkpipe.pipeline.comparison")


@dataclass(slots=True)
class PipelineComparisonResult:
    results: list[TranscriptionResult] = field(default_factory=list)
    total_duration_ms: float = 0.0

    def successful(self) -> list[TranscriptionResult]:
        return [result for result in self.results if result.is_success]

    def fastest(self) -> TranscriptionResult | None:
        candidates = self.successful()
        if not candidates:
            return None
        return min(candidates, key=lambda result: result.pipeline.metrics.total_duration_ms or 0.0)


class PipelineComparisonRunner:
    """Executes pipelines one after another, each with its own fresh context."""

    async def run(self, audio_data: bytes, pipelines: Sequence[Pipeline]) -> PipelineComparisonResult:
        if not audio_data:
            raise ValueError("Audio data cannot be empty")
        if not pipelines:
            raise ValueError("At least one pipeline must be provided")

        logger.info("Comparing %d pipelines on %d bytes of audio", len(pipelines), len(audio_data))
        comparison = PipelineComparisonResult()
        start = time.perf_counter()
        for pipeline in pipelines:
            ctx = PipelineContext()
            ctx.set_data(AUDIO_DATA, bytes(audio_data))
            result = await pipeline.execute(ctx)
            if result.is_success:
                logger.info("Pipeline '%s' completed in %.2fms", pipeline.name, result.metrics.total_duration_ms)
            else:
                logger.info("Pipeline '%s' failed: %s", pipeline.name, result.error_message)
            comparison.results.append(extract_result(result, ctx))
        comparison.total_duration_ms = (time.perf_counter() - start) * 1000.0
        return comparison
