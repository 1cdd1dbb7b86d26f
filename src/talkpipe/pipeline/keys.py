"""Well-known context keys shared by the bundled stages."""
from __future__ import annotations

from .context import ContextKey

AUDIO_DATA = ContextKey("AudioData", bytes)
AUDIO_DURATION = ContextKey("AudioDuration", float)
RAW_TRANSCRIPTION = ContextKey("RawTranscription", str)
CLEANED_TEXT = ContextKey("CleanedText", str)
LANGUAGE = ContextKey("Language", str)
TEXT_CLEANING_SKIPPED = ContextKey("TextCleaningSkipped", bool)
WINDOW_CONTEXT = ContextKey("WindowContext", str)
