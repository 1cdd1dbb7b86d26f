"""Custom exception types used across the TalkPipe pipeline."""
from __future__ import annotations

from typing import Iterable


class TalkPipeError(Exception):
    """Base exception for TalkPipe-specific errors."""


class PipelineConfigurationError(TalkPipeError):
    """Raised when a pipeline configuration cannot be turned into a pipeline."""


class UnknownStageTypeError(PipelineConfigurationError):
    """Raised when no stage factory is registered for a configured stage type."""

    def __init__(self, stage_type: str, available: Iterable[str]) -> None:
        self.stage_type = stage_type
        self.available = sorted(available)
        super().__init__(
            f"No factory registered for stage type: {stage_type}. "
            f"Available types: {', '.join(self.available) or '<none>'}"
        )


class PipelineNotFoundError(TalkPipeError):
    """Raised when a named pipeline configuration does not exist."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Pipeline configuration not found: {name}")
        self.name = name


class PipelineCancelledError(TalkPipeError):
    """Raised by stages that observe a cancellation request mid-execution."""

    def __init__(self, message: str = "Pipeline execution was cancelled") -> None:
        super().__init__(message)


class ProviderError(TalkPipeError):
    """Raised when a transcription or text-cleaning provider call fails."""
