"""Outcome objects for stage attempts and whole pipeline runs."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, model_validator

from .metrics import PipelineMetrics, StageMetrics

CANCELLED_MESSAGE = "Pipeline execution was cancelled"


class StageResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_success: bool
    metrics: StageMetrics
    error_message: str | None = None

    @model_validator(mode="after")
    def _check_message(self) -> "StageResult":
        if self.is_success and self.error_message is not None:
            raise ValueError("successful stage results carry no error message")
        if not self.is_success and not self.error_message:
            raise ValueError("failed stage results require an error message")
        return self

    @classmethod
    def success(cls, metrics: StageMetrics) -> "StageResult":
        return cls(is_success=True, metrics=metrics)

    @classmethod
    def failure(cls, error_message: str, metrics: StageMetrics) -> "StageResult":
        return cls(is_success=False, error_message=error_message or "Stage failed", metrics=metrics)


class PipelineResult(BaseModel):
    """Final, immutable outcome of one ``Pipeline.execute`` call."""

    model_config = ConfigDict(frozen=True)

    is_success: bool
    metrics: PipelineMetrics
    error_message: str | None = None
    failed_stage_name: str | None = None
    cancelled: bool = False
