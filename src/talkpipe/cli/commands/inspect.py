"""`talkpipe inspect` command implementation."""
from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console

from ...pipeline.metrics import PipelineMetrics
from .common import stage_table

console = Console()


def inspect(record_path: Path = typer.Argument(..., help="JSON run record written by `talkpipe run --output`.")) -> None:
    """Display metrics and text from a previous run."""
    if not record_path.exists():
        raise typer.BadParameter(f"Run record {record_path} not found")

    record = json.loads(record_path.read_text())
    metrics = PipelineMetrics.model_validate(record.get("metrics", {}))

    console.print(f"[bold]Audio:[/bold] {record.get('audio')}")
    console.print(f"[bold]Pipeline:[/bold] {record.get('pipeline')}")
    console.print(f"[bold]Duration:[/bold] {(record.get('duration_ms') or 0.0):.2f}ms")
    if record.get("success"):
        console.print("[bold]Status:[/bold] [green]success[/green]")
    else:
        console.print(f"[bold]Status:[/bold] [red]failed[/red] ({record.get('error')})")

    console.print(stage_table(metrics))
    if metrics.global_metrics:
        console.print("[bold]Global metrics:[/bold]")
        console.print_json(data=metrics.global_metrics)
    if record.get("text"):
        console.print("[bold]Text:[/bold]")
        console.print(record["text"], highlight=False)
