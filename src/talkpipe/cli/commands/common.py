"""Helpers shared by CLI commands."""
from __future__ import annotations

import asyncio
import signal
from pathlib import Path
from typing import Awaitable, TypeVar

from rich.console import Console
from rich.table import Table

from ...config.loader import load_config
from ...pipeline.cancellation import CancellationToken
from ...pipeline.factory import PipelineBuildContext
from ...pipeline.metrics import PipelineMetrics
from ...pipeline.progress import ProgressEvent
from ...pipeline.registry import PipelineRegistry

T = TypeVar("T")


def build_registry(config: Path) -> PipelineRegistry:
    cfg = load_config(config)
    registry = PipelineRegistry(
        config_source=lambda: load_config(config),
        build_context=PipelineBuildContext.from_config(cfg),
    )
    registry.load()
    return registry


def progress_printer(console: Console):
    def report(event: ProgressEvent) -> None:
        prefix = f"[{event.percentage:>3}%] " if event.percentage is not None else "       "
        console.print(f"[dim]{prefix}[/dim]{event.message}", highlight=False)

    return report


async def _run_cancellable(coro: Awaitable[T], token: CancellationToken) -> T:
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, token.cancel)
    except (NotImplementedError, RuntimeError):  # pragma: no cover - Windows event loops
        return await coro
    try:
        return await coro
    finally:
        loop.remove_signal_handler(signal.SIGINT)


def run_cancellable(coro: Awaitable[T], token: CancellationToken) -> T:
    """Run ``coro`` to completion; Ctrl-C cancels ``token`` instead of killing the run."""
    return asyncio.run(_run_cancellable(coro, token))


def stage_table(metrics: PipelineMetrics, title: str = "Stages") -> Table:
    table = Table(title=title, show_header=True, header_style="bold green")
    table.add_column("Stage", no_wrap=True, min_width=18)
    table.add_column("Duration (ms)", justify="right")
    table.add_column("Metrics")
    for stage in metrics.stage_metrics:
        details = ", ".join(f"{key}={value}" for key, value in stage.custom_metrics.items())
        table.add_row(stage.stage_name, f"{stage.duration_ms:.2f}", details)
    return table
