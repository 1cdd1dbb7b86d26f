"""Audio validation stage."""
from __future__ import annotations

import io
import wave

import numpy as np

from ..context import PipelineContext
from ..keys import AUDIO_DATA, AUDIO_DURATION
from ..results import StageResult
from .base import PipelineStage

MAX_AUDIO_BYTES = 26_214_400  # 25 MiB upload limit of the hosted transcription API
WAV_HEADER_BYTES = 44
DEFAULT_SAMPLE_RATE = 16_000
DEFAULT_SAMPLE_WIDTH = 2
DEFAULT_CHANNELS = 1


def _peak_amplitude(frames: bytes, sample_width: int) -> float | None:
    if sample_width != 2 or len(frames) < 2:
        return None
    samples = np.frombuffer(frames[: len(frames) - len(frames) % 2], dtype="<i2").astype(np.int32)
    return float(np.abs(samples).max()) / 32768.0


def inspect_wav(audio: bytes) -> tuple[float | None, float | None]:
    """Return ``(duration_seconds, peak_amplitude)`` for a WAV buffer.

    Falls back to 16 kHz, 16-bit mono PCM behind a 44-byte header when the
    buffer carries no parseable RIFF header.
    """
    try:
        with wave.open(io.BytesIO(audio), "rb") as reader:
            frame_count = reader.getnframes()
            rate = reader.getframerate()
            frames = reader.readframes(frame_count)
            duration = frame_count / rate if rate else None
            return duration, _peak_amplitude(frames, reader.getsampwidth())
    except (wave.Error, EOFError):
        pass

    if len(audio) <= WAV_HEADER_BYTES:
        return None, None
    payload = audio[WAV_HEADER_BYTES:]
    duration = len(payload) / (DEFAULT_SAMPLE_RATE * DEFAULT_SAMPLE_WIDTH * DEFAULT_CHANNELS)
    return duration, _peak_amplitude(payload, DEFAULT_SAMPLE_WIDTH)


class AudioValidationStage(PipelineStage):
    """Checks the captured audio buffer and records its size and duration.

    Reads ``AudioData``; writes ``AudioDuration`` when it can be derived.
    """

    name = "Audio Validation"
    stage_type = "AudioValidation"

    def __init__(self, *, max_bytes: int = MAX_AUDIO_BYTES, **kwargs) -> None:
        super().__init__(**kwargs)
        self.max_bytes = max_bytes

    async def execute(self, ctx: PipelineContext) -> StageResult:
        metrics = self.start_metrics()
        audio = ctx.get_data(AUDIO_DATA)

        if not audio:
            return self.fail("Audio data is null or empty", metrics)

        if len(audio) > self.max_bytes:
            size_mb = len(audio) / 1_048_576
            limit_mb = self.max_bytes / 1_048_576
            return self.fail(f"Audio file exceeds {limit_mb:.0f}MB limit (size: {size_mb:.2f}MB)", metrics)

        duration, peak = inspect_wav(audio)
        if duration is not None:
            ctx.set_data(AUDIO_DURATION, float(duration))
            metrics.add_metric("AudioDurationSeconds", duration)
        if peak is not None:
            metrics.add_metric("PeakAmplitude", round(peak, 4))

        metrics.add_metric("AudioSizeBytes", len(audio))
        metrics.add_metric("AudioSizeMB", len(audio) / 1_048_576)

        ctx.report_progress("Audio validated", percentage=10, stage_name=self.name)
        return self.succeed(metrics)
