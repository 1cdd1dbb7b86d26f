from datetime import timedelta

import pytest
from pydantic import ValidationError

from talkpipe.pipeline import PipelineMetrics, PipelineResult, StageMetrics, StageResult
from talkpipe.pipeline.metrics import utcnow


def test_duration_is_derived_from_timestamps() -> None:
    start = utcnow()
    metrics = StageMetrics(stage_name="Test", start_time=start, end_time=start + timedelta(milliseconds=250))

    assert metrics.duration_ms == pytest.approx(250, abs=1)


def test_end_before_start_is_rejected() -> None:
    start = utcnow()

    with pytest.raises(ValidationError):
        StageMetrics(stage_name="Test", start_time=start, end_time=start - timedelta(seconds=1))


def test_finish_never_moves_before_start() -> None:
    metrics = StageMetrics.start("Test")
    metrics.finish()

    assert metrics.end_time >= metrics.start_time
    assert metrics.duration_ms >= 0


def test_custom_metrics_typed_lookup() -> None:
    metrics = StageMetrics(stage_name="Test")
    metrics.add_metric("WordCount", 150)
    metrics.add_metric("ModelUsed", "test-model")

    assert metrics.get_metric("WordCount", int) == 150
    assert metrics.get_metric("ModelUsed", str) == "test-model"
    assert metrics.get_metric("WordCount", str) is None
    assert metrics.get_metric("NonExistent", str) is None


def test_pipeline_metrics_tracks_stages() -> None:
    metrics = PipelineMetrics(pipeline_name="Test")
    start = utcnow()
    metrics.add_stage_metrics(
        StageMetrics(stage_name="Test", start_time=start, end_time=start + timedelta(milliseconds=100))
    )

    assert len(metrics.stage_metrics) == 1
    assert metrics.stage_metrics[0].stage_name == "Test"
    assert metrics.stage_metrics[0].duration_ms >= 0
    assert metrics.total_duration_ms is None


def test_summary_lists_stages_and_global_metrics() -> None:
    metrics = PipelineMetrics(pipeline_name="Demo")
    stage = StageMetrics.start("Validate")
    stage.add_metric("AudioSizeBytes", 42)
    metrics.add_stage_metrics(stage.finish())
    metrics.set_global_metric("TotalWordCount", 3)
    metrics.end_time = utcnow()

    summary = metrics.summary()

    assert "Pipeline: Demo" in summary
    assert "Validate" in summary
    assert "AudioSizeBytes=42" in summary
    assert "TotalWordCount: 3" in summary


def test_metrics_serialize_to_json() -> None:
    metrics = PipelineMetrics(pipeline_name="Demo")
    metrics.add_stage_metrics(StageMetrics.start("Validate").finish())

    payload = metrics.model_dump(mode="json")
    restored = PipelineMetrics.model_validate(payload)

    assert payload["stage_metrics"][0]["stage_name"] == "Validate"
    assert restored.stage_names() == ["Validate"]


def test_stage_result_factories() -> None:
    success = StageResult.success(StageMetrics(stage_name="Test"))
    failure = StageResult.failure("Test error", StageMetrics(stage_name="Test"))

    assert success.is_success
    assert success.error_message is None
    assert success.metrics.stage_name == "Test"
    assert not failure.is_success
    assert failure.error_message == "Test error"
    assert failure.metrics.stage_name == "Test"


def test_stage_result_requires_message_on_failure() -> None:
    with pytest.raises(ValidationError):
        StageResult(is_success=False, metrics=StageMetrics(stage_name="Test"))


def test_pipeline_result_is_immutable() -> None:
    result = PipelineResult(is_success=True, metrics=PipelineMetrics())

    with pytest.raises(ValidationError):
        result.is_success = False
