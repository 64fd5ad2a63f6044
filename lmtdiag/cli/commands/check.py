"""``lmtdiag check`` — validate live telemetry against the catalog.

Pulls every LMT metric off the monitoring bus, checks that each record
decodes for its schema version, then lists the file systems configured in
the catalog.  Exits 0 after a clean scan, however many records failed to
decode; exits 1 on any fatal condition.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from lmtdiag.config import config
from lmtdiag.dispatch.dispatcher import RecordDispatcher
from lmtdiag.dispatch.registry import default_registry
from lmtdiag.dispatch.sources import (
    CatalogSource,
    CerebroStatSource,
    MysqlCatalogSource,
    SnapshotSource,
    TelemetrySource,
)
from lmtdiag.sink.diagnostics import DiagnosticSink, set_sink

console = Console()

PROGRAM = "lmtdiag"


def _collaborators(snapshot: Path | None) -> tuple[TelemetrySource, CatalogSource]:
    if snapshot is not None:
        source = SnapshotSource(snapshot)
        return source, source
    return (
        CerebroStatSource(config.cerebro_stat, timeout=config.command_timeout),
        MysqlCatalogSource(config.mysql_client, timeout=config.command_timeout),
    )


def check_cmd(
    filesystem: str = typer.Option(
        None,
        "--filesystem",
        "-f",
        help="Only report this file system [default: all].",
    ),
    snapshot: Path = typer.Option(
        None,
        "--snapshot",
        help="Read metrics and file systems from a JSON snapshot instead of live clients.",
    ),
    dest: str = typer.Option(
        None,
        "--dest",
        help="Diagnostic destination: stdout, stderr, syslog[:fac[:level]], cerebro, or a path.",
    ),
    db_host: str = typer.Option(None, "--db-host", help="Catalog host."),
    db_port: int = typer.Option(None, "--db-port", help="Catalog port (0 for default)."),
    db_user: str = typer.Option(None, "--db-user", help="Catalog user."),
) -> None:
    """Check telemetry records and configured file systems."""
    source, catalog = _collaborators(snapshot or config.snapshot_path)

    with DiagnosticSink(
        program=PROGRAM, max_message_length=config.max_message_length
    ) as sink:
        previous = set_sink(sink)
        try:
            sink.select_destination(dest or config.error_dest)
            dispatcher = RecordDispatcher(sink, source, default_registry(), catalog)
            report = dispatcher.scan()
            names = dispatcher.check_catalog(
                db_host or config.db_host,
                config.db_port if db_port is None else db_port,
                db_user or config.db_user,
                config.db_password,
                filesystem=filesystem,
            )
        finally:
            set_sink(previous)

    style = "green" if report.clean else "yellow"
    console.print(
        f"[{style}]{len(report.decoded)}/{report.fetched - report.skipped} records decoded[/{style}]"
        f", {len(report.failures)} failed, {len(names)} file system(s) checked"
    )
