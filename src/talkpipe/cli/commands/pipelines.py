"""`talkpipe pipelines` command group."""
from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ...config.loader import DEFAULT_CONFIG_PATH
from ...errors import PipelineNotFoundError
from .common import build_registry

console = Console()
pipelines = typer.Typer(help="Pipeline discovery.")

ConfigOption = typer.Option(
    DEFAULT_CONFIG_PATH,
    "--config",
    "-c",
    help="Path to the TalkPipe configuration file.",
    exists=True,
    file_okay=True,
    dir_okay=False,
    resolve_path=True,
)


@pipelines.command("list")
def list_pipelines(config: Path = ConfigOption) -> None:
    """List enabled pipelines; the default one is marked."""
    registry = build_registry(config)
    table = Table(title="Available Pipelines", show_header=True, header_style="bold magenta")
    table.add_column("Name", no_wrap=True, min_width=20)
    table.add_column("Stages", justify="right")
    table.add_column("Description")
    for pipeline in registry.configurations():
        stages = str(sum(1 for stage in pipeline.stages if stage.enabled))
        name = f"{pipeline.name} (default)" if pipeline.name == registry.default_name else pipeline.name
        table.add_row(name, stages, pipeline.description)
    console.print(table)


@pipelines.command("show")
def show_pipeline(
    name: str = typer.Argument(..., help="Pipeline name to display."),
    config: Path = ConfigOption,
) -> None:
    """Dump an enabled pipeline configuration as JSON."""
    registry = build_registry(config)
    try:
        pipeline = registry.get_configuration(name)
    except PipelineNotFoundError as exc:
        raise typer.BadParameter(f"{exc} in {config}") from exc
    console.print_json(data=pipeline.model_dump(mode="json"))
