"""The stage contract every pipeline step implements."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import timedelta

from ..context import PipelineContext
from ..metrics import StageMetrics
from ..results import StageResult


class PipelineStage(ABC):
    """A named, retryable unit of work operating on a shared context.

    Stages never reference each other; they read their inputs from and write
    their outputs to the :class:`PipelineContext` under documented keys. The
    executor may call :meth:`execute` several times within one run when
    ``retry_count`` is positive, so implementations must tolerate re-invocation.

    ``retry_count`` is the number of additional attempts after the first
    failure and ``retry_delay`` the pause between attempts, in seconds.
    """

    name: str
    stage_type: str
    retry_count: int = 0
    retry_delay: float | timedelta = 0.0

    def __init__(
        self,
        *,
        name: str | None = None,
        retry_count: int | None = None,
        retry_delay: float | timedelta | None = None,
    ) -> None:
        if name is not None:
            self.name = name
        if retry_count is not None:
            if retry_count < 0:
                msg = f"retry_count must be non-negative, got {retry_count}"
                raise ValueError(msg)
            self.retry_count = retry_count
        if retry_delay is not None:
            self.retry_delay = retry_delay
        self.logger = logging.getLogger(f"talkpipe.stages.{self.stage_type}")

    @abstractmethod
    async def execute(self, ctx: PipelineContext) -> StageResult:  # pragma: no cover - runtime behaviour
        """Run the stage against ``ctx``."""

    def start_metrics(self) -> StageMetrics:
        return StageMetrics.start(self.name)

    def succeed(self, metrics: StageMetrics) -> StageResult:
        return StageResult.success(metrics.finish())

    def fail(self, message: str, metrics: StageMetrics) -> StageResult:
        self.logger.debug("Stage %s reporting failure: %s", self.name, message)
        return StageResult.failure(message, metrics.finish())

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, retry_count={self.retry_count})"
