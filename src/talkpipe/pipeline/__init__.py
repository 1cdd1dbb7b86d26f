"""Pipeline package exports."""
from .cancellation import CancellationToken
from .context import ContextKey, PipelineContext
from .metrics import PipelineMetrics, StageMetrics
from .progress import ProgressEvent, ProgressRecorder, ProgressSink
from .results import CANCELLED_MESSAGE, PipelineResult, StageResult
from .runner import Pipeline, create_pipeline
from .stages.base import PipelineStage

__all__ = [
    "CANCELLED_MESSAGE",
    "CancellationToken",
    "ContextKey",
    "Pipeline",
    "PipelineContext",
    "PipelineMetrics",
    "PipelineResult",
    "PipelineStage",
    "ProgressEvent",
    "ProgressRecorder",
    "ProgressSink",
    "StageMetrics",
    "StageResult",
    "create_pipeline",
]
