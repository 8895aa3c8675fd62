"""Main CLI entry point for Revdiff.

This module provides the command-line interface for diffing configuration
revisions.
"""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from revdiff import __version__
from revdiff.cli.diff_cli import files_cmd, unit_cmd
from revdiff.cli.top_level_cli import config_cmd, version_cmd
from revdiff.utils.log import configure_logging, get_logger

console = Console(stderr=True)
logger = get_logger()


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", is_flag=True, help="Log debug output to stderr.")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write structured logs to this file.",
)
def cli(verbose: bool, log_file: Optional[Path]) -> None:
    """Revdiff - show differences between configuration revisions"""
    configure_logging(verbose=verbose, log_file=log_file)
    logger.debug("[cli] Starting CLI invocation", extra={"verbose": verbose})


cli.add_command(files_cmd)
cli.add_command(unit_cmd)
cli.add_command(config_cmd)
cli.add_command(version_cmd)


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)
    except SystemExit:
        raise
    except (RuntimeError, ValueError, TypeError, OSError) as e:
        console.print(f"[red]Fatal error: {escape(str(e))}[/red]")
        logger.warning(
            "[cli] Fatal error in main CLI entrypoint: %s: %s",
            type(e).__name__,
            e,
        )
        sys.exit(1)


if __name__ == "__main__":
    main()
