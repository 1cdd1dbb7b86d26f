"""Pipeline executor orchestrating sequential stage execution."""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Iterable, List

from ..errors import PipelineCancelledError
from .context import PipelineContext
from .metrics import PipelineMetrics, StageMetrics, utcnow
from .results import CANCELLED_MESSAGE, PipelineResult, StageResult
from .stages.base import PipelineStage


def _delay_seconds(value: float | timedelta | None) -> float:
    if value is None:
        return 0.0
    if isinstance(value, timedelta):
        value = value.total_seconds()
    return max(float(value), 0.0)


class Pipeline:
    """Runs an ordered list of stages against one :class:`PipelineContext`.

    Stages run strictly in list order. A failing stage is retried according to
    its own ``retry_count``/``retry_delay``; once its attempts are exhausted the
    run stops and later stages never execute. Cancellation is checked before
    every stage and between retry attempts. Exceptions raised by a stage are
    converted into failing results, so ``execute`` only raises on task
    cancellation.

    A ``Pipeline`` holds no per-run state and may be executed concurrently
    with distinct contexts.
    """

    def __init__(self, stages: Iterable[PipelineStage] | None = None, name: str = "pipeline") -> None:
        self.name = name
        self.stages: List[PipelineStage] = list(stages or [])
        self.logger = logging.getLogger("talkpipe.pipeline")

    async def execute(self, ctx: PipelineContext) -> PipelineResult:
        metrics = PipelineMetrics(pipeline_name=self.name)
        ctx.metrics = metrics
        total = len(self.stages)
        self.logger.info("Pipeline '%s' starting with %d stages", self.name, total)

        for index, stage in enumerate(self.stages):
            position = f"{index + 1}/{total}"
            if ctx.is_cancelled:
                self.logger.info("Pipeline '%s' cancelled at stage %s (%s)", self.name, position, stage.name)
                return self._cancelled(metrics, stage.name)

            ctx.report_progress(
                f"Stage {position}: {stage.name}...",
                percentage=int(index / total * 100),
                stage_name=stage.name,
            )
            self.logger.debug("Pipeline '%s' executing stage %s: %s", self.name, position, stage.name)

            result, cancelled = await self._run_with_retry(stage, ctx)
            metrics.add_stage_metrics(result.metrics)

            if cancelled:
                ctx.report_progress(f"{stage.name} cancelled", stage_name=stage.name)
                self.logger.info("Pipeline '%s' cancelled during stage '%s'", self.name, stage.name)
                return self._cancelled(metrics, stage.name)

            if not result.is_success:
                ctx.report_progress(f"{stage.name} failed: {result.error_message}", stage_name=stage.name)
                self.logger.error("Pipeline '%s' failed at stage '%s': %s", self.name, stage.name, result.error_message)
                metrics.end_time = utcnow()
                return PipelineResult(
                    is_success=False,
                    error_message=result.error_message,
                    failed_stage_name=stage.name,
                    metrics=metrics.model_copy(deep=True),
                )

            ctx.report_progress(
                f"{stage.name} completed",
                percentage=int((index + 1) / total * 100),
                stage_name=stage.name,
            )
            self.logger.info(
                "Pipeline '%s' stage '%s' completed in %.2fms", self.name, stage.name, result.metrics.duration_ms
            )

        metrics.end_time = utcnow()
        metrics.set_global_metric("StageCount", total)
        ctx.report_progress("Complete", percentage=100)
        self.logger.info("Pipeline '%s' completed successfully in %.2fms", self.name, metrics.total_duration_ms)
        return PipelineResult(is_success=True, metrics=metrics.model_copy(deep=True))

    async def _run_with_retry(self, stage: PipelineStage, ctx: PipelineContext) -> tuple[StageResult, bool]:
        attempts = max(int(stage.retry_count or 0), 0) + 1
        delay = _delay_seconds(stage.retry_delay)

        for attempt in range(1, attempts + 1):
            result, cancelled = await self._attempt(stage, ctx)
            if result.is_success or cancelled or attempt == attempts:
                return result, cancelled

            self.logger.warning(
                "Stage '%s' failed (attempt %d/%d): %s; retrying in %.2fs",
                stage.name,
                attempt,
                attempts,
                result.error_message,
                delay,
            )
            if await ctx.cancellation.wait(delay):
                return result, True

        raise AssertionError("unreachable")  # pragma: no cover

    async def _attempt(self, stage: PipelineStage, ctx: PipelineContext) -> tuple[StageResult, bool]:
        started = utcnow()
        try:
            result = await stage.execute(ctx)
        except PipelineCancelledError as exc:
            metrics = StageMetrics(stage_name=stage.name, start_time=started, end_time=max(utcnow(), started))
            return StageResult.failure(str(exc), metrics), True
        except Exception as exc:  # noqa: BLE001
            self.logger.exception("Pipeline '%s' stage '%s' raised", self.name, stage.name)
            detail = str(exc) or type(exc).__name__
            metrics = StageMetrics(stage_name=stage.name, start_time=started, end_time=max(utcnow(), started))
            metrics.add_metric("Exception", detail)
            return StageResult.failure(f"Exception in {stage.name}: {detail}", metrics), False

        if not isinstance(result, StageResult):
            metrics = StageMetrics(stage_name=stage.name, start_time=started, end_time=max(utcnow(), started))
            message = f"Stage {stage.name} returned {type(result).__name__} instead of StageResult"
            return StageResult.failure(message, metrics), False
        return result, False

    def _cancelled(self, metrics: PipelineMetrics, stage_name: str) -> PipelineResult:
        metrics.end_time = utcnow()
        return PipelineResult(
            is_success=False,
            error_message=CANCELLED_MESSAGE,
            failed_stage_name=stage_name,
            cancelled=True,
            metrics=metrics.model_copy(deep=True),
        )

    def __len__(self) -> int:
        return len(self.stages)

    def __repr__(self) -> str:
        return f"Pipeline(name={self.name!r}, stages={[stage.name for stage in self.stages]})"


def create_pipeline(stages: Iterable[PipelineStage], name: str = "pipeline") -> Pipeline:
    return Pipeline(stages=stages, name=name)
