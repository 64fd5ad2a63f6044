"""Main Typer application — imports and registers all CLI commands.

Entry point: ``lmtdiag`` (configured via pyproject.toml console_scripts).
"""

from __future__ import annotations

import logging

import typer

from lmtdiag.cli.commands.check import check_cmd
from lmtdiag.config import config

app = typer.Typer(
    name="lmtdiag",
    help="lmtdiag: cross-check LMT telemetry against the configured file systems.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None, "--log-level", help="Internal log level (default from LMTDIAG_LOG_LEVEL)."
    ),
) -> None:
    """Configure internal logging before any command runs."""
    logging.basicConfig(
        level=(log_level or config.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Register subcommands
app.command(name="check", help="Check telemetry records and configured file systems.")(check_cmd)


@app.command(name="decoders", help="List supported metric schema versions.")
def decoders_cmd() -> None:
    """List every registered (metric, version) pair."""
    from rich.console import Console
    from rich.table import Table

    from lmtdiag.dispatch.registry import CURRENT_METRIC_NAMES, default_registry

    console = Console()
    registry = default_registry()

    table = Table(title="Registered Decoders")
    table.add_column("Metric", style="cyan")
    table.add_column("Version", style="green", justify="right")
    table.add_column("Generation")

    for name, version in registry.entries():
        generation = "current" if name in CURRENT_METRIC_NAMES else "legacy"
        table.add_row(name, str(version), generation)

    console.print(table)


@app.command(name="dest", help="Validate a diagnostic destination selector.")
def dest_cmd(
    selector: str = typer.Argument(..., help="Destination selector to validate."),
) -> None:
    """Print the canonical form of *selector*, or fail if it is invalid."""
    from rich.console import Console

    from lmtdiag.sink.selector import SelectorError, parse_selector

    console = Console()
    try:
        destination = parse_selector(selector)
    except SelectorError as e:
        console.print(f"[red]Invalid selector:[/red] {e}")
        raise typer.Exit(code=1)
    console.print(f"{destination.kind}: {destination.to_selector()}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
