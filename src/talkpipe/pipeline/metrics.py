"""Timing and measurement records collected while a pipeline runs."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

T = TypeVar("T")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _typed_lookup(values: dict[str, Any], key: str, expected_type: type[T] | None, default: T | None) -> T | None:
    if key not in values:
        return default
    value = values[key]
    if expected_type is not None and not isinstance(value, expected_type):
        return default
    return value


class StageMetrics(BaseModel):
    """Metrics collected during a single stage execution.

    ``custom_metrics`` holds stage specific measurements such as ``WordCount``,
    ``Model`` or ``AudioSizeBytes``.
    """

    model_config = ConfigDict(validate_assignment=True)

    stage_name: str
    start_time: datetime = Field(default_factory=utcnow)
    end_time: datetime = Field(default_factory=utcnow)
    custom_metrics: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_order(self) -> "StageMetrics":
        if self.end_time < self.start_time:
            msg = f"end_time precedes start_time for stage '{self.stage_name}'"
            raise ValueError(msg)
        return self

    @classmethod
    def start(cls, stage_name: str) -> "StageMetrics":
        now = utcnow()
        return cls(stage_name=stage_name, start_time=now, end_time=now)

    def finish(self) -> "StageMetrics":
        self.end_time = max(utcnow(), self.start_time)
        return self

    @property
    def duration_ms(self) -> float:
        return max((self.end_time - self.start_time).total_seconds() * 1000.0, 0.0)

    def add_metric(self, key: str, value: Any) -> None:
        self.custom_metrics[key] = value

    def get_metric(self, key: str, expected_type: type[T] | None = None, default: T | None = None) -> T | None:
        return _typed_lookup(self.custom_metrics, key, expected_type, default)


class PipelineMetrics(BaseModel):
    """Aggregated metrics for one pipeline execution."""

    pipeline_name: str = ""
    start_time: datetime = Field(default_factory=utcnow)
    end_time: datetime | None = None
    stage_metrics: List[StageMetrics] = Field(default_factory=list)
    global_metrics: dict[str, Any] = Field(default_factory=dict)

    @property
    def total_duration_ms(self) -> float | None:
        if self.end_time is None:
            return None
        return max((self.end_time - self.start_time).total_seconds() * 1000.0, 0.0)

    def add_stage_metrics(self, metrics: StageMetrics) -> None:
        self.stage_metrics.append(metrics)

    def stage_names(self) -> list[str]:
        return [entry.stage_name for entry in self.stage_metrics]

    def set_global_metric(self, key: str, value: Any) -> None:
        self.global_metrics[key] = value

    def get_global_metric(self, key: str, expected_type: type[T] | None = None, default: T | None = None) -> T | None:
        return _typed_lookup(self.global_metrics, key, expected_type, default)

    def summary(self) -> str:
        total = self.total_duration_ms
        lines = [
            f"Pipeline: {self.pipeline_name}",
            f"Total Duration: {total:.2f}ms" if total is not None else "Total Duration: n/a",
            f"Stages: {len(self.stage_metrics)}",
        ]
        for stage in self.stage_metrics:
            line = f"  - {stage.stage_name}: {stage.duration_ms:.2f}ms"
            if stage.custom_metrics:
                details = ", ".join(f"{key}={value}" for key, value in stage.custom_metrics.items())
                line += f" ({details})"
            lines.append(line)
        if self.global_metrics:
            lines.append("Global Metrics:")
            lines.extend(f"  - {key}: {value}" for key, value in self.global_metrics.items())
        return "\n".join(lines) + "\n"
