from pathlib import Path

import pytest

from talkpipe.config.models import AppConfig, PipelineConfiguration, StageConfiguration
from talkpipe.errors import PipelineConfigurationError, PipelineNotFoundError, UnknownStageTypeError
from talkpipe.pipeline.factory import PipelineBuildContext, PipelineFactory, default_factory
from talkpipe.pipeline.registry import PipelineRegistry
from talkpipe.pipeline.service import PipelineService
from talkpipe.pipeline.stages import (
    AudioValidationStage,
    GPTTextCleaningStage,
    OpenAIWhisperTranscriptionStage,
    PassThroughCleaningStage,
)


def make_config(tmp_path: Path) -> AppConfig:
    return AppConfig.model_validate(
        {
            "history": {"path": str(tmp_path / "history.jsonl")},
            "pipelines": [
                {
                    "name": "Cloud",
                    "stages": [
                        {"type": "AudioValidation"},
                        {"type": "OpenAIWhisperTranscription", "retry_count": 4, "retry_delay_seconds": 0.5},
                        {"type": "GPTTextCleaning", "name": "Cleanup", "settings": {"min_words": 3}},
                        {"type": "HistorySaving", "enabled": False},
                    ],
                },
                {
                    "name": "Local",
                    "stages": [{"type": "AudioValidation"}, {"type": "PassThroughCleaning"}],
                },
                {"name": "Disabled", "enabled": False, "stages": [{"type": "AudioValidation"}]},
            ],
        }
    )


def test_default_factory_registers_bundled_stages() -> None:
    assert set(default_factory().registered_types()) == {
        "AudioValidation",
        "OpenAIWhisperTranscription",
        "GPTTextCleaning",
        "PassThroughCleaning",
        "HistorySaving",
    }


def test_build_applies_configuration(tmp_path: Path) -> None:
    cfg = make_config(tmp_path)
    build = PipelineBuildContext(history=cfg.history, api_key="sk-test")

    pipeline = default_factory().build(cfg.pipelines[0], build)

    assert pipeline.name == "Cloud"
    assert [type(stage) for stage in pipeline.stages] == [
        AudioValidationStage,
        OpenAIWhisperTranscriptionStage,
        GPTTextCleaningStage,
    ]
    transcription = pipeline.stages[1]
    assert transcription.retry_count == 4
    assert transcription.retry_delay == 0.5
    cleaning = pipeline.stages[2]
    assert cleaning.name == "Cleanup"
    assert cleaning.min_words == 3
    assert cleaning.retry_count == GPTTextCleaningStage.retry_count


def test_missing_api_key_fails_build(tmp_path: Path) -> None:
    cfg = make_config(tmp_path)

    with pytest.raises(PipelineConfigurationError, match="OPENAI_API_KEY"):
        default_factory().build(cfg.pipelines[0], PipelineBuildContext(api_key=None))


def test_unknown_stage_type_lists_available_types() -> None:
    config = PipelineConfiguration(name="Odd", stages=[StageConfiguration(type="Teleport")])

    with pytest.raises(UnknownStageTypeError) as excinfo:
        default_factory().build(config, PipelineBuildContext())

    assert "Teleport" in str(excinfo.value)
    assert "AudioValidation" in str(excinfo.value)


def test_pipeline_without_enabled_stages_is_rejected() -> None:
    config = PipelineConfiguration(
        name="Hollow", stages=[StageConfiguration(type="AudioValidation", enabled=False)]
    )

    with pytest.raises(PipelineConfigurationError):
        default_factory().build(config, PipelineBuildContext())


def test_custom_factory_registration() -> None:
    factory = PipelineFactory()
    factory.register("Echo", lambda config, build: PassThroughCleaningStage(name=config.name or "Echo"))
    config = PipelineConfiguration(name="Custom", stages=[StageConfiguration(type="Echo", name="Repeat")])

    pipeline = factory.build(config, PipelineBuildContext())

    assert [stage.name for stage in pipeline.stages] == ["Repeat"]


def test_registry_defaults_to_first_enabled_pipeline(tmp_path: Path) -> None:
    cfg = make_config(tmp_path)
    registry = PipelineRegistry(lambda: cfg, PipelineBuildContext(history=cfg.history, api_key="sk-test"))
    registry.load()

    assert registry.available_names() == ["Cloud", "Local"]
    assert registry.default_name == "Cloud"
    assert registry.default_pipeline().name == "Cloud"


def test_registry_honours_configured_default(tmp_path: Path) -> None:
    cfg = make_config(tmp_path).model_copy(update={"default_pipeline": "Local"})
    registry = PipelineRegistry(lambda: cfg, PipelineBuildContext())
    registry.load()

    assert registry.default_name == "Local"


def test_registry_set_default(tmp_path: Path) -> None:
    cfg = make_config(tmp_path)
    registry = PipelineRegistry(lambda: cfg, PipelineBuildContext())
    registry.load()

    registry.set_default("Local")
    assert registry.default_name == "Local"
    with pytest.raises(PipelineNotFoundError):
        registry.set_default("Disabled")


def test_registry_returns_none_for_unknown_or_unbuildable(tmp_path: Path) -> None:
    cfg = make_config(tmp_path)
    registry = PipelineRegistry(lambda: cfg, PipelineBuildContext(api_key=None))
    registry.load()

    assert registry.get_pipeline("Nope") is None
    assert registry.get_pipeline("Cloud") is None
    assert registry.get_pipeline("Local") is not None


def test_bad_stage_setting_is_a_configuration_error() -> None:
    config = PipelineConfiguration(
        name="Strict", stages=[StageConfiguration(type="AudioValidation", settings={"max_bytes": "big"})]
    )

    with pytest.raises(PipelineConfigurationError, match="AudioValidation") as excinfo:
        default_factory().build(config, PipelineBuildContext())

    assert isinstance(excinfo.value.__cause__, ValueError)


@pytest.mark.asyncio
async def test_service_fails_cleanly_on_bad_stage_setting() -> None:
    cfg = AppConfig.model_validate(
        {"pipelines": [{"name": "Strict", "stages": [{"type": "AudioValidation", "settings": {"max_bytes": "big"}}]}]}
    )
    registry = PipelineRegistry(lambda: cfg, PipelineBuildContext())
    registry.load()

    assert registry.get_pipeline("Strict") is None
    result = await PipelineService(registry).execute(b"\x00" * 100)

    assert not result.is_success
    assert result.error_message == "Pipeline 'Strict' could not be built; check its configuration"
    assert result.pipeline.metrics.stage_metrics == []


def test_registry_exposes_enabled_configurations(tmp_path: Path) -> None:
    cfg = make_config(tmp_path)
    registry = PipelineRegistry(lambda: cfg, PipelineBuildContext())
    registry.load()

    assert [config.name for config in registry.configurations()] == ["Cloud", "Local"]
    assert registry.get_configuration("Local").stages[1].type == "PassThroughCleaning"
    with pytest.raises(PipelineNotFoundError):
        registry.get_configuration("Disabled")


def test_registry_reload_picks_up_changes(tmp_path: Path) -> None:
    configs = [make_config(tmp_path), AppConfig.model_validate({"pipelines": [{"name": "Fresh", "stages": []}]})]
    registry = PipelineRegistry(lambda: configs.pop(0), PipelineBuildContext())
    registry.load()
    registry.set_default("Local")

    registry.reload()

    assert registry.available_names() == ["Fresh"]
    assert registry.default_name == "Fresh"
