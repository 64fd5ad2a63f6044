"""Shared test fixtures for lmtdiag."""

from __future__ import annotations

import syslog
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

from lmtdiag.dispatch.registry import DecoderRegistry, default_registry
from lmtdiag.dispatch.sources import StaticCatalogSource, StaticTelemetrySource
from lmtdiag.sink.diagnostics import DiagnosticSink

PROGRAM = "lmtdiag"

# One well-formed value per registered (metric, version) pair.
VALID_METRICS: dict[tuple[str, int], str] = {
    ("lmt_oss", 1): "1;oss1;12.5;40.0;",
    ("lmt_router", 1): "1;rtr1;3.0;10.0;123456;",
    ("lmt_ost", 1): "1;oss1;lustre-OST0000;100;200;300;400;500;600;",
    ("lmt_ost", 2): "2;oss1;5.0;20.0;lustre-OST0000;1;2;3;4;",
    ("lmt_mds", 2): "2;mds1;lustre-MDT0000;1.0;2.0;10;20;30;40;open;1;2;3;close;4;5;6;",
    ("lmt_mdt", 1): "1;mds1;1.5;2.5;lustre-MDT0000;7;8;",
}


class FakeSyslog:
    """Stands in for the ``syslog`` module and records every call.

    Models the single process-wide connection: ``closelog`` forgets the
    ident and facility, and a message logged with no open connection goes
    out under ``LOG_USER`` with no ident, as the C library does.
    """

    LOG_NDELAY = syslog.LOG_NDELAY
    LOG_PID = syslog.LOG_PID

    def __init__(self) -> None:
        self.opened: list[tuple[str, int, int]] = []
        self.messages: list[tuple[int, str]] = []
        # (ident, facility, priority, message) as actually delivered
        self.delivered: list[tuple[str | None, int, int, str]] = []
        self.close_count = 0
        self.ident: str | None = None
        self.facility: int | None = None

    def openlog(self, ident: str, logoption: int, facility: int) -> None:
        self.opened.append((ident, logoption, facility))
        self.ident = ident
        self.facility = facility

    def syslog(self, priority: int, message: str) -> None:
        self.messages.append((priority, message))
        facility = syslog.LOG_USER if self.facility is None else self.facility
        self.delivered.append((self.ident, facility, priority, message))

    def closelog(self) -> None:
        self.close_count += 1
        self.ident = None
        self.facility = None


class RecordingChannel:
    """Bus error channel that keeps every line it receives."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def error_output(self, text: str) -> None:
        self.lines.append(text)


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def log_path(tmp_dir: Path) -> Path:
    """Path of a diagnostics log file inside the temp directory."""
    return tmp_dir / "lmtdiag.log"


@pytest.fixture
def fake_syslog(monkeypatch: pytest.MonkeyPatch) -> FakeSyslog:
    """Replace the syslog module used by the syslog backend."""
    fake = FakeSyslog()
    monkeypatch.setattr("lmtdiag.sink.backends.system_log.syslog", fake)
    return fake


@pytest.fixture
def bus_channel() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture
def file_sink(log_path: Path, bus_channel: RecordingChannel) -> Iterator[DiagnosticSink]:
    """A DiagnosticSink appending to ``log_path``."""
    with DiagnosticSink(
        program=PROGRAM, selector=str(log_path), bus_channel=bus_channel
    ) as sink:
        yield sink


@pytest.fixture
def read_log(log_path: Path) -> Callable[[], list[str]]:
    """Return the lines written to ``log_path`` so far."""

    def _read() -> list[str]:
        if not log_path.exists():
            return []
        return log_path.read_text(encoding="utf-8").splitlines()

    return _read


@pytest.fixture
def registry() -> DecoderRegistry:
    return default_registry()


@pytest.fixture
def make_source() -> Callable[..., StaticTelemetrySource]:
    """Factory fixture: a static telemetry source over (name, value) pairs."""

    def _factory(metrics: list[tuple[str, Any]] | None = None) -> StaticTelemetrySource:
        if metrics is None:
            metrics = [(name, value) for (name, _), value in VALID_METRICS.items()]
        return StaticTelemetrySource(metrics)

    return _factory


@pytest.fixture
def catalog() -> StaticCatalogSource:
    return StaticCatalogSource(["lustre1", "lustre2"])
