"""Shared CLI app objects."""

import typer
from rich.console import Console

app = typer.Typer(
    name="wcagscan",
    help="Automated WCAG accessibility scanning for web pages",
    no_args_is_help=True,
)
console = Console()
