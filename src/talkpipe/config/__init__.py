"""Configuration package exports."""
from .loader import DEFAULT_CONFIG_PATH, load_config
from .models import (
    AppConfig,
    HistorySettings,
    PipelineConfiguration,
    ProviderSettings,
    StageConfiguration,
)

__all__ = [
    "AppConfig",
    "DEFAULT_CONFIG_PATH",
    "HistorySettings",
    "PipelineConfiguration",
    "ProviderSettings",
    "StageConfiguration",
    "load_config",
]
