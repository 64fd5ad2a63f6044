"""RecordDispatcher — validates every telemetry record on the bus.

A scan runs FETCHING -> ITERATING -> DONE.  While iterating, each record
goes through VERSION-PARSE -> ROUTE -> DECODE independently.

Failure tiers:

* **Fatal** — the telemetry fetch fails, or the catalog is unreachable or
  empty.  Reported once through the sink, then ``FatalError`` is raised.
* **Soft** — one record has a malformed version, an unregistered
  ``(name, version)`` pair, or fails to decode.  Reported through the
  sink; the scan moves on to the next record.

The tier depends only on which step failed, never on the error's content.
"""

from __future__ import annotations

import errno
import logging
from collections.abc import Iterable
from typing import NoReturn

from lmtdiag.dispatch.registry import METRIC_NAMES, Decoder, DecoderRegistry
from lmtdiag.dispatch.sources import (
    CatalogSource,
    CatalogSourceError,
    RawMetric,
    SourceError,
    TelemetrySource,
    TelemetrySourceError,
)
from lmtdiag.models.telemetry import (
    DecodeOutcome,
    FailureKind,
    MalformedVersionError,
    ScanReport,
    SoftFailure,
    TelemetryRecord,
)
from lmtdiag.sink.diagnostics import DiagnosticSink

logger = logging.getLogger(__name__)

# Used when a decoder fails without a reason or an errno of its own.
FALLBACK_ERRNO = errno.EINVAL


class RecordDispatcher:
    """Routes telemetry records to decoders and reports what fails.

    Parameters
    ----------
    sink:
        Where soft and fatal failures are reported.
    source:
        Telemetry collaborator queried by ``fetch_all``/``scan``.
    registry:
        Decoder lookup table.
    catalog:
        Catalog collaborator used by ``check_catalog``.

    Usage
    -----
    ::

        dispatcher = RecordDispatcher(sink, source, default_registry(), catalog)
        report = dispatcher.scan()
        dispatcher.check_catalog("localhost", 0, "lwatchclient", None)
    """

    def __init__(
        self,
        sink: DiagnosticSink,
        source: TelemetrySource,
        registry: DecoderRegistry,
        catalog: CatalogSource | None = None,
    ) -> None:
        self._sink = sink
        self._source = source
        self._registry = registry
        self._catalog = catalog

    @property
    def registry(self) -> DecoderRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Telemetry
    # ------------------------------------------------------------------

    def fetch_all(self, names: Iterable[str] = METRIC_NAMES) -> list[RawMetric]:
        """Fetch every record published under *names*.

        A fetch failure is fatal: with no data there is nothing to check.
        """
        names = list(names)
        try:
            metrics = self._source.fetch(names)
        except TelemetrySourceError as exc:
            self._fatal(exc, "telemetry source")
        logger.debug("Fetched %d records for %s", len(metrics), ",".join(names))
        return metrics

    def dispatch(self, name: str, raw: str) -> SoftFailure | None:
        """Validate one record, reporting and returning any soft failure."""
        try:
            record = TelemetryRecord.from_wire(name, raw)
        except MalformedVersionError as exc:
            logger.debug("Malformed version: %s", exc)
            return self._soft(
                SoftFailure(
                    metric=name,
                    kind=FailureKind.MALFORMED_VERSION,
                    message=f"{name}: error parsing metric version",
                )
            )

        decoder = self._registry.lookup(*record.route_key)
        if decoder is None:
            return self._soft(
                SoftFailure(
                    metric=name,
                    version=record.version,
                    kind=FailureKind.UNKNOWN_VERSION,
                    message=f"{record.label}: unknown metric version",
                )
            )

        outcome = self._decode(decoder, record)
        if outcome.ok:
            return None

        if outcome.reason:
            return self._soft(
                SoftFailure(
                    metric=name,
                    version=record.version,
                    kind=FailureKind.DECODE_FAILED,
                    message=f"{record.label}: {outcome.reason}",
                )
            )
        errnum = outcome.errnum or FALLBACK_ERRNO
        failure = SoftFailure(
            metric=name,
            version=record.version,
            kind=FailureKind.DECODE_FAILED,
            message=record.label,
        )
        self._sink.report_with_errno(errnum, failure.message)
        return failure

    def scan(self, names: Iterable[str] = METRIC_NAMES) -> ScanReport:
        """Fetch and validate every record; only the fetch can be fatal."""
        metrics = self.fetch_all(names)
        decoded: list[str] = []
        failures: list[SoftFailure] = []
        skipped = 0
        for name, raw in metrics:
            if raw is None:
                skipped += 1
                continue
            failure = self.dispatch(name, raw)
            if failure is None:
                decoded.append(name)
            else:
                failures.append(failure)
        logger.info(
            "Scan complete: %d fetched, %d decoded, %d failed, %d without value",
            len(metrics),
            len(decoded),
            len(failures),
            skipped,
        )
        return ScanReport(
            fetched=len(metrics),
            decoded=decoded,
            skipped=skipped,
            failures=failures,
        )

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def check_catalog(
        self,
        host: str,
        port: int,
        user: str,
        credential: str | None,
        filesystem: str | None = None,
    ) -> list[str]:
        """Report each configured file system by name.

        An unreachable or empty catalog is fatal, as is a *filesystem*
        filter that matches nothing.  Returns the reported names.
        """
        if self._catalog is None:
            self._sink.report_fatal("no catalog source configured")
        try:
            handles = self._catalog.enumerate(host, port, user, credential)
        except CatalogSourceError as exc:
            self._fatal(exc, "catalog source")
        if not handles:
            self._sink.report_fatal("catalog has no file systems configured")

        names = [handle.display_name() for handle in handles]
        if filesystem is not None:
            names = [n for n in names if n == filesystem]
            if not names:
                self._sink.report_fatal(f"{filesystem}: file system is not configured")
        for name in names:
            self._sink.report(f"catalog: {name}")
        return names

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _decode(self, decoder: Decoder, record: TelemetryRecord) -> DecodeOutcome:
        try:
            return decoder(record.payload)
        except OSError as exc:
            return DecodeOutcome.failure(exc.strerror, exc.errno)
        except ValueError as exc:
            return DecodeOutcome.failure(str(exc) or None)

    def _soft(self, failure: SoftFailure) -> SoftFailure:
        self._sink.report(failure.message)
        return failure

    def _fatal(self, exc: SourceError, what: str) -> NoReturn:
        if exc.reason:
            self._sink.report_fatal(f"{what}: {exc.reason}")
        self._sink.report_with_errno_fatal(exc.errnum or errno.EIO, what)
