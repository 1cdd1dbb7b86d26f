"""Progress events emitted to observers of a pipeline run."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    message: str
    percentage: int | None = None
    stage_name: str | None = None


ProgressSink = Callable[[ProgressEvent], None]


@dataclass(slots=True)
class ProgressRecorder:
    """Sink that keeps every event it receives, in order."""

    events: list[ProgressEvent] = field(default_factory=list)

    def __call__(self, event: ProgressEvent) -> None:
        self.events.append(event)

    @property
    def messages(self) -> list[str]:
        return [event.message for event in self.events]
