"""Pipeline stage contract and bundled stage implementations."""
from .audio import AudioValidationStage
from .base import PipelineStage
from .cleaning import GPTTextCleaningStage, PassThroughCleaningStage
from .history import HistorySavingStage
from .transcription import OpenAIWhisperTranscriptionStage

__all__ = [
    "AudioValidationStage",
    "GPTTextCleaningStage",
    "HistorySavingStage",
    "OpenAIWhisperTranscriptionStage",
    "PassThroughCleaningStage",
    "PipelineStage",
]
