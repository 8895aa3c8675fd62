"""Top-level utility commands for `revdiff` CLI."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from revdiff import __version__
from revdiff.core.config import config_manager, get_effective_config

console = Console()


@click.command(name="config")
def config_cmd() -> None:
    """Show the effective configuration."""
    config = get_effective_config(Path.cwd())

    console.print("\n[bold]Configuration[/bold]\n")
    console.print(f"Global file: {escape(str(config_manager.global_config_path))}")
    console.print(f"Unified by default: {config.unified}")
    console.print(f"Color: {config.color}")
    console.print(f"Context lines: {config.context_lines}")
    console.print(f"Hunk headers: {config.hunk_header_style}")
    console.print(f"Default space: {escape(config.default_space or 'Not set')}")
    console.print(f"Revision store: {escape(config.store_path or 'Not set')}\n")

    console.print("[bold]Colors:[/bold]")
    for slot, style in config.colors.model_dump().items():
        console.print(f"  {slot}: [{style}]{escape(style)}[/]")
    console.print()


@click.command(name="version")
def version_cmd() -> None:
    """Show version information."""
    console.print(f"Revdiff version {__version__}")


__all__ = ["config_cmd", "version_cmd"]
