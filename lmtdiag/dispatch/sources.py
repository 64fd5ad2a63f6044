"""Telemetry and catalog collaborators.

A ``TelemetrySource`` returns ``(name, raw_value)`` pairs from the
monitoring bus; a ``CatalogSource`` enumerates the file systems configured
in the relational store.  Both signal failure by raising their own error
type; the dispatcher decides whether that failure is fatal.

Implementations:

* ``StaticTelemetrySource`` / ``StaticCatalogSource`` — in-memory.
* ``SnapshotSource`` — both roles, from a JSON snapshot file.
* ``CerebroStatSource`` — runs the ``cerebro-stat`` client.
* ``MysqlCatalogSource`` — runs the ``mysql`` client.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from lmtdiag.models.telemetry import DataSourceHandle

logger = logging.getLogger(__name__)

FILESYSTEM_DB_PREFIX = "filesystem_"

RawMetric = tuple[str, str | None]


class SourceError(RuntimeError):
    """Base for collaborator failures; may carry an errno."""

    def __init__(self, message: str | None = None, errnum: int | None = None) -> None:
        super().__init__(message or "")
        self.reason = message
        self.errnum = errnum


class TelemetrySourceError(SourceError):
    """The monitoring bus could not be queried."""


class CatalogSourceError(SourceError):
    """The catalog could not be reached or read."""


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class TelemetrySource(Protocol):
    """Supplies raw metric values from the monitoring bus."""

    def fetch(self, names: Iterable[str]) -> list[RawMetric]:
        """Return every ``(name, raw_value)`` published under *names*.

        ``raw_value`` is ``None`` for a metric with no current value.

        Raises
        ------
        TelemetrySourceError
            If the bus cannot be queried.
        """
        ...


@runtime_checkable
class CatalogSource(Protocol):
    """Enumerates configured file systems."""

    def enumerate(
        self, host: str, port: int, user: str, credential: str | None
    ) -> list[DataSourceHandle]:
        """Return a handle per configured file system.

        Raises
        ------
        CatalogSourceError
            If the catalog cannot be reached.
        """
        ...


class FilesystemHandle(BaseModel):
    """A file system known to the catalog."""

    model_config = ConfigDict(frozen=True)

    name: str
    database: str = ""

    def display_name(self) -> str:
        return self.name


# ---------------------------------------------------------------------------
# In-memory sources
# ---------------------------------------------------------------------------


class StaticTelemetrySource:
    """Serves a fixed list of ``(name, raw_value)`` pairs."""

    def __init__(self, metrics: Iterable[RawMetric]) -> None:
        self._metrics = list(metrics)

    def fetch(self, names: Iterable[str]) -> list[RawMetric]:
        wanted = set(names)
        return [(name, value) for name, value in self._metrics if name in wanted]


class StaticCatalogSource:
    """Serves a fixed list of file system names."""

    def __init__(self, names: Iterable[str]) -> None:
        self._handles = [FilesystemHandle(name=n) for n in names]

    def enumerate(
        self, host: str, port: int, user: str, credential: str | None
    ) -> list[DataSourceHandle]:
        return list(self._handles)


class SnapshotSource:
    """Reads metrics and file systems from a JSON snapshot.

    Format::

        {
          "metrics": [{"name": "lmt_ost", "value": "2;oss1;..."}],
          "filesystems": ["lustre1", "lustre2"]
        }

    The file is re-read on every call.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self, error_type: type[SourceError]) -> dict[str, Any]:
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise error_type(f"{self._path}: {exc.strerror}", exc.errno) from exc
        except json.JSONDecodeError as exc:
            raise error_type(f"{self._path}: invalid snapshot: {exc.msg}") from exc
        if not isinstance(data, dict):
            raise error_type(f"{self._path}: snapshot is not a JSON object")
        return data

    def fetch(self, names: Iterable[str]) -> list[RawMetric]:
        wanted = set(names)
        metrics = self._load(TelemetrySourceError).get("metrics", [])
        result: list[RawMetric] = []
        for entry in metrics:
            if not isinstance(entry, dict) or "name" not in entry:
                raise TelemetrySourceError(f"{self._path}: malformed metric entry")
            if entry["name"] in wanted:
                value = entry.get("value")
                result.append((entry["name"], None if value is None else str(value)))
        logger.debug("SnapshotSource: %d metrics from %s", len(result), self._path)
        return result

    def enumerate(
        self, host: str, port: int, user: str, credential: str | None
    ) -> list[DataSourceHandle]:
        names = self._load(CatalogSourceError).get("filesystems", [])
        return [FilesystemHandle(name=str(n)) for n in names]


# ---------------------------------------------------------------------------
# Command-line client sources
# ---------------------------------------------------------------------------


def _run(
    argv: list[str],
    error_type: type[SourceError],
    timeout: float,
    env: dict[str, str] | None = None,
) -> str:
    try:
        result = subprocess.run(
            argv,
            capture_output=True,
            text=True,
            timeout=timeout,
            env=env,
        )
    except OSError as exc:
        raise error_type(f"{argv[0]}: {exc.strerror}", exc.errno) from exc
    except subprocess.TimeoutExpired as exc:
        raise error_type(f"{argv[0]}: timed out after {timeout:g}s") from exc
    if result.returncode != 0:
        detail = result.stderr.strip() or f"exit status {result.returncode}"
        raise error_type(f"{argv[0]}: {detail}")
    return result.stdout


class CerebroStatSource:
    """Queries the monitoring bus with ``cerebro-stat -m <metric>``.

    Each output line has the form ``<node>: <value>``; lines without a
    separator are ignored.
    """

    def __init__(self, command: str = "cerebro-stat", timeout: float = 30.0) -> None:
        self._command = command
        self._timeout = timeout

    def fetch(self, names: Iterable[str]) -> list[RawMetric]:
        result: list[RawMetric] = []
        for name in names:
            output = _run([self._command, "-m", name], TelemetrySourceError, self._timeout)
            for line in output.splitlines():
                _, sep, value = line.partition(": ")
                if not sep:
                    continue
                value = value.strip()
                result.append((name, value or None))
        return result


class MysqlCatalogSource:
    """Lists ``filesystem_*`` databases with the ``mysql`` client.

    The credential is passed through ``MYSQL_PWD`` rather than argv.
    """

    QUERY = f"SHOW DATABASES LIKE '{FILESYSTEM_DB_PREFIX}%'"

    def __init__(self, command: str = "mysql", timeout: float = 30.0) -> None:
        self._command = command
        self._timeout = timeout

    def enumerate(
        self, host: str, port: int, user: str, credential: str | None
    ) -> list[DataSourceHandle]:
        argv = [self._command, "-h", host, "-u", user, "-N", "-B", "-e", self.QUERY]
        if port:
            argv[1:1] = ["-P", str(port)]
        env = dict(os.environ)
        if credential:
            env["MYSQL_PWD"] = credential
        output = _run(argv, CatalogSourceError, self._timeout, env=env)
        handles: list[DataSourceHandle] = []
        for line in output.splitlines():
            database = line.strip()
            if not database.startswith(FILESYSTEM_DB_PREFIX):
                continue
            handles.append(
                FilesystemHandle(
                    name=database[len(FILESYSTEM_DB_PREFIX):], database=database
                )
            )
        return handles
