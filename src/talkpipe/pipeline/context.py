"""Shared runtime context for pipeline stages."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar, overload

from .cancellation import CancellationToken
from .metrics import PipelineMetrics
from .progress import ProgressEvent, ProgressSink

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class ContextKey(Generic[T]):
    """A context key bound to the type of value stored under it."""

    name: str
    type: type[T]

    def __str__(self) -> str:
        return self.name


@dataclass
class PipelineContext:
    """Mutable state shared by every stage of one pipeline run.

    Created by the caller for a single invocation and discarded afterwards.
    Reads of missing keys return ``None`` (or the supplied default) so stages
    can check optional upstream outputs.
    """

    data: dict[str, Any] = field(default_factory=dict)
    settings: dict[str, Any] = field(default_factory=dict)
    cancellation: CancellationToken = field(default_factory=CancellationToken)
    progress: ProgressSink | None = None
    metrics: PipelineMetrics = field(default_factory=PipelineMetrics)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("talkpipe.pipeline"))

    @overload
    def get_data(self, key: ContextKey[T], expected_type: None = None, default: T | None = None) -> T | None: ...

    @overload
    def get_data(self, key: str, expected_type: type[T], default: T | None = None) -> T | None: ...

    @overload
    def get_data(self, key: str, expected_type: None = None, default: Any = None) -> Any: ...

    def get_data(self, key, expected_type=None, default=None):
        if isinstance(key, ContextKey):
            expected_type = expected_type or key.type
        name = str(key)
        if name not in self.data:
            return default
        value = self.data[name]
        if expected_type is not None and not isinstance(value, expected_type):
            return default
        return value

    def set_data(self, key: str | ContextKey[Any], value: Any) -> None:
        if isinstance(key, ContextKey) and value is not None and not isinstance(value, key.type):
            msg = f"Context key '{key.name}' expects {key.type.__name__}, got {type(value).__name__}"
            raise TypeError(msg)
        self.data[str(key)] = value

    def has(self, key: str | ContextKey[Any]) -> bool:
        return str(key) in self.data

    def keys(self) -> list[str]:
        return list(self.data)

    def get_setting(self, key: str, expected_type: type[T] | None = None, default: T | None = None) -> T | None:
        value = self.settings.get(key, default)
        if expected_type is not None and not isinstance(value, expected_type):
            return default
        return value

    @property
    def is_cancelled(self) -> bool:
        return self.cancellation.is_cancelled

    def report_progress(self, message: str, percentage: int | None = None, stage_name: str | None = None) -> None:
        if self.progress is None:
            return
        try:
            self.progress(ProgressEvent(message=message, percentage=percentage, stage_name=stage_name))
        except Exception:  # noqa: BLE001
            self.logger.exception("Progress sink raised while reporting %r", message)
