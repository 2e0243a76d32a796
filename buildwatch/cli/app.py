"""Main Typer application — imports and registers all CLI commands.

Entry point: ``buildwatch`` (configured via pyproject.toml console_scripts).

Commands: source, wait, logs, exists.
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from buildwatch.cli.commands.exists_cmd import exists_cmd
from buildwatch.cli.commands.logs_cmd import logs_cmd
from buildwatch.cli.commands.source_cmd import source_cmd
from buildwatch.cli.commands.wait_cmd import wait_cmd
from buildwatch.config import BuildwatchConfig

app = typer.Typer(
    name="buildwatch",
    help="buildwatch: submit image builds to the cluster and wait for them.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="source", help="Build the source image for a job.")(source_cmd)
app.command(name="wait", help="Wait for an existing build to finish.")(wait_cmd)
app.command(name="logs", help="Print the logs of a build.")(logs_cmd)
app.command(name="exists", help="Check whether a pipeline image tag exists.")(exists_cmd)


def configure_logging(level: str) -> None:
    """Route library logging through Rich on stderr."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (default: $BUILDWATCH_LOG_LEVEL or INFO).",
    ),
) -> None:
    """buildwatch: submit image builds to the cluster and wait for them."""
    configure_logging(log_level or BuildwatchConfig().log_level)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
