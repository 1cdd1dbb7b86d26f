"""`talkpipe compare` command implementation."""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List

import typer
from rich.console import Console
from rich.table import Table

from ...config.loader import DEFAULT_CONFIG_PATH
from ...logging_utils import configure_logging
from ...pipeline.comparison import PipelineComparisonRunner
from .common import build_registry

console = Console()


def compare(
    audio_path: Path = typer.Argument(..., help="WAV file to transcribe."),
    pipelines: List[str] = typer.Option(
        None, "--pipeline", "-p", help="Pipeline to include; repeat the option. Defaults to all pipelines."
    ),
    config: Path = typer.Option(
        DEFAULT_CONFIG_PATH,
        "--config",
        "-c",
        help="Path to the TalkPipe configuration file.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level."),
) -> None:
    """Run several pipelines over the same audio and compare them."""
    configure_logging(level=log_level)

    if not audio_path.exists():
        raise typer.BadParameter(f"Audio path {audio_path} does not exist")

    registry = build_registry(config)
    names = pipelines or registry.available_names()
    built = []
    for name in names:
        pipeline = registry.get_pipeline(name)
        if pipeline is None:
            raise typer.BadParameter(f"Pipeline '{name}' is unknown or cannot be built")
        built.append(pipeline)

    comparison = asyncio.run(PipelineComparisonRunner().run(audio_path.read_bytes(), built))

    table = Table(title="Pipeline Comparison", show_header=True, header_style="bold magenta")
    table.add_column("Pipeline", no_wrap=True, min_width=12)
    table.add_column("Status")
    table.add_column("Duration (ms)", justify="right")
    table.add_column("Words", justify="right")
    table.add_column("Text / Error")
    for result in comparison.results:
        metrics = result.pipeline.metrics
        status = "[green]ok[/green]" if result.is_success else "[red]failed[/red]"
        table.add_row(
            metrics.pipeline_name,
            status,
            f"{(metrics.total_duration_ms or 0.0):.2f}",
            str(result.word_count),
            result.text if result.is_success else (result.error_message or ""),
        )
    console.print(table)

    fastest = comparison.fastest()
    if fastest is not None:
        console.print(f"[bold]Fastest:[/bold] {fastest.pipeline.metrics.pipeline_name}")
