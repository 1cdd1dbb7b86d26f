"""`talkpipe run` command implementation."""
from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console

from ...config.loader import DEFAULT_CONFIG_PATH
from ...logging_utils import configure_logging
from ...pipeline.cancellation import CancellationToken
from ...pipeline.service import PipelineService
from .common import build_registry, progress_printer, run_cancellable, stage_table

console = Console()


def run(
    audio_path: Path = typer.Argument(..., help="WAV file to transcribe."),
    pipeline: str = typer.Option(None, "--pipeline", "-p", help="Pipeline name. Defaults to the configured default."),
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
    window_context: str = typer.Option(
        None, "--window-context", help="Name of the application the text is meant for."
    ),
    output: Path = typer.Option(None, "--output", "-o", help="Write a JSON run record to this path."),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level."),
) -> None:
    """Run a pipeline over an audio file and print the resulting text."""
    configure_logging(level=log_level)

    if not audio_path.exists():
        raise typer.BadParameter(f"Audio path {audio_path} does not exist")

    registry = build_registry(config)
    service = PipelineService(registry)
    token = CancellationToken()

    result = run_cancellable(
        service.execute(
            audio_path.read_bytes(),
            pipeline_name=pipeline,
            window_context=window_context,
            progress=progress_printer(console),
            cancellation=token,
        ),
        token,
    )
    metrics = result.pipeline.metrics

    if output is not None:
        record = {
            "audio": str(audio_path),
            "config_path": str(config),
            "pipeline": metrics.pipeline_name,
            "success": result.is_success,
            "cancelled": result.pipeline.cancelled,
            "error": result.error_message,
            "failed_stage": result.pipeline.failed_stage_name,
            "text": result.text,
            "language": result.language,
            "word_count": result.word_count,
            "duration_ms": metrics.total_duration_ms,
            "metrics": metrics.model_dump(mode="json"),
        }
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(json.dumps(record, indent=2, ensure_ascii=False))

    console.print(stage_table(metrics))
    if not result.is_success:
        console.print(f"[bold red]Pipeline failed:[/bold red] {result.error_message}")
        raise typer.Exit(code=1)

    console.print(
        f"[bold green]Pipeline finished[/bold green] in {(metrics.total_duration_ms or 0.0):.2f}ms "
        f"({result.word_count} words)"
    )
    console.print(result.text, highlight=False)
