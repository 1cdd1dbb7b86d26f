import io
import wave

import numpy as np
import pytest


def make_wav(seconds: float = 1.0, rate: int = 16_000, amplitude: float = 0.5) -> bytes:
    samples = int(seconds * rate)
    tone = np.sin(np.linspace(0, 2 * np.pi * 440 * seconds, samples, endpoint=False)) * amplitude * 32767
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as writer:
        writer.setnchannels(1)
        writer.setsampwidth(2)
        writer.setframerate(rate)
        writer.writeframes(tone.astype("<i2").tobytes())
    return buffer.getvalue()


@pytest.fixture
def wav_bytes() -> bytes:
    return make_wav()
