"""Utilities for loading TalkPipe configuration."""
from __future__ import annotations

from pathlib import Path

import yaml

from .models import AppConfig

DEFAULT_CONFIG_PATH = Path("config/talkpipe.yaml")


def load_config(config_path: Path | str | None = None) -> AppConfig:
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    if not path.exists():
        msg = f"Configuration file not found: {path}"
        raise FileNotFoundError(msg)

    payload = yaml.safe_load(path.read_text()) or {}
    return AppConfig.model_validate(payload)
