"""Command-line interface bootstrap for TalkPipe."""
from __future__ import annotations

import typer

from .commands.compare import compare
from .commands.inspect import inspect
from .commands.pipelines import pipelines
from .commands.run import run


app = typer.Typer(help="Dictation pipelines: validate, transcribe and clean recorded speech.")

app.command()(run)
app.command()(compare)
app.command()(inspect)
app.add_typer(pipelines, name="pipelines")

__all__ = ["app"]
