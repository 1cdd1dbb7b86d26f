"""Registry of named pipeline configurations."""
from __future__ import annotations

import logging
from typing import Callable

from ..config.models import AppConfig, PipelineConfiguration
from ..errors import PipelineNotFoundError, TalkPipeError
from .factory import PipelineBuildContext, PipelineFactory, default_factory
from .runner import Pipeline

logger = logging.getLogger("talkpipe.pipeline.registry")


class PipelineRegistry:
    """Keeps enabled pipeline configurations and builds pipelines on demand.

    ``config_source`` is called on every :meth:`load`, so a registry backed by
    ``lambda: load_config(path)`` picks up edits on :meth:`reload`.
    """

    def __init__(
        self,
        config_source: Callable[[], AppConfig],
        build_context: PipelineBuildContext,
        factory: PipelineFactory | None = None,
    ) -> None:
        self._config_source = config_source
        self.build_context = build_context
        self.factory = factory or default_factory()
        self._configurations: dict[str, PipelineConfiguration] = {}
        self._default_name: str | None = None
        self.config: AppConfig | None = None

    def load(self) -> None:
        config = self._config_source()
        self.config = config
        self._configurations = {pipeline.name: pipeline for pipeline in config.pipelines if pipeline.enabled}

        if self._default_name not in self._configurations:
            self._default_name = None
        if self._default_name is None and config.default_pipeline in self._configurations:
            self._default_name = config.default_pipeline
        if self._default_name is None and self._configurations:
            self._default_name = next(iter(self._configurations))
            logger.info("Set default pipeline: %s", self._default_name)

        logger.info("Loaded %d pipeline configurations", len(self._configurations))

    reload = load

    @property
    def default_name(self) -> str | None:
        return self._default_name

    def available_names(self) -> list[str]:
        return list(self._configurations)

    def configurations(self) -> list[PipelineConfiguration]:
        return list(self._configurations.values())

    def get_configuration(self, name: str) -> PipelineConfiguration:
        try:
            return self._configurations[name]
        except KeyError:
            raise PipelineNotFoundError(name) from None

    def get_pipeline(self, name: str) -> Pipeline | None:
        config = self._configurations.get(name)
        if config is None:
            logger.warning("Pipeline configuration not found: %s", name)
            return None
        try:
            return self.factory.build(config, self.build_context)
        except TalkPipeError as exc:
            logger.error("Failed to build pipeline '%s': %s", name, exc)
            return None

    def default_pipeline(self) -> Pipeline | None:
        if self._default_name is None:
            logger.warning("No default pipeline set")
            return None
        return self.get_pipeline(self._default_name)

    def set_default(self, name: str) -> None:
        if name not in self._configurations:
            raise PipelineNotFoundError(name)
        self._default_name = name
        logger.info("Set default pipeline: %s", name)
