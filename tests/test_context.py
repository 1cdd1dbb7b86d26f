import pytest

from talkpipe.pipeline import ContextKey, PipelineContext
from talkpipe.pipeline.keys import AUDIO_DATA, AUDIO_DURATION, TEXT_CLEANING_SKIPPED


def test_get_data_returns_none_for_missing_key() -> None:
    ctx = PipelineContext()

    assert ctx.get_data("NonExistentKey") is None
    assert ctx.get_data("NonExistentKey", str) is None
    assert ctx.get_data(TEXT_CLEANING_SKIPPED) is None
    assert ctx.get_data("NonExistentKey", default="fallback") == "fallback"


def test_set_and_get_bytes() -> None:
    ctx = PipelineContext()
    payload = bytes([1, 2, 3, 4, 5])

    ctx.set_data("TestBytes", payload)

    assert ctx.get_data("TestBytes", bytes) == payload
    assert ctx.has("TestBytes")
    assert ctx.keys() == ["TestBytes"]


def test_type_mismatch_yields_default() -> None:
    ctx = PipelineContext()
    ctx.set_data("Count", "seven")

    assert ctx.get_data("Count", int) is None
    assert ctx.get_data("Count", int, default=0) == 0
    assert ctx.get_data("Count") == "seven"


def test_keys_are_case_sensitive_and_last_write_wins() -> None:
    ctx = PipelineContext()
    ctx.set_data("key", 1)
    ctx.set_data("Key", 2)
    ctx.set_data("key", 3)

    assert ctx.get_data("key") == 3
    assert ctx.get_data("Key") == 2


def test_typed_keys_enforce_their_type() -> None:
    ctx = PipelineContext()
    ctx.set_data(AUDIO_DURATION, 1.5)

    assert ctx.get_data(AUDIO_DURATION) == 1.5
    assert ctx.get_data("AudioDuration") == 1.5
    with pytest.raises(TypeError):
        ctx.set_data(AUDIO_DATA, "not bytes")


def test_typed_key_lookup_ignores_foreign_values() -> None:
    ctx = PipelineContext()
    ctx.set_data("AudioData", [1, 2, 3])

    assert ctx.get_data(AUDIO_DATA) is None


def test_custom_context_key() -> None:
    attempts = ContextKey("Attempts", int)
    ctx = PipelineContext()
    ctx.set_data(attempts, 2)

    assert ctx.get_data(attempts) == 2
    assert str(attempts) == "Attempts"


def test_settings_lookup() -> None:
    ctx = PipelineContext(settings={"Language": "en", "Threshold": 0.5})

    assert ctx.get_setting("Language", str) == "en"
    assert ctx.get_setting("Threshold", str) is None
    assert ctx.get_setting("Missing", default=3) == 3


def test_report_progress_without_sink_is_noop() -> None:
    ctx = PipelineContext()

    ctx.report_progress("nothing listens")
