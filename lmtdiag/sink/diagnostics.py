"""DiagnosticSink — operator-facing reporting through one active backend.

Every diagnostic line is ``<prog>: <message>``, with ``: <strerror>``
appended for errno reports.  Tooling scrapes these lines, so the format
must not change.

The active backend is chosen by a selector string (see
``lmtdiag.sink.selector``) and can be replaced at any time.  Replacement is
atomic: the new backend is opened first, then the old one is released and
the new one installed.  If the new selector is invalid or cannot be
opened, the failure is reported through the old backend and the process
exits.

Fatal reports raise ``FatalError``, a ``SystemExit`` with status 1, so
``with`` blocks unwind and the sink is closed on the way out.
"""

from __future__ import annotations

import logging
import os
import sys
import threading
from pathlib import Path
from typing import NoReturn

from lmtdiag.models.sink import Destination
from lmtdiag.sink.backends import SinkBackend, open_backend
from lmtdiag.sink.backends.bus import BusErrorChannel
from lmtdiag.sink.selector import SelectorError, parse_selector

logger = logging.getLogger(__name__)

DEFAULT_SELECTOR = "stderr"
DEFAULT_MAX_MESSAGE_LENGTH = 255
TRUNCATION_MARKER = "..."
FATAL_STATUS = 1


class FatalError(SystemExit):
    """Raised after a fatal diagnostic has been reported.

    Carries the reported message; the exit status is always non-zero.
    """

    def __init__(self, message: str, status: int = FATAL_STATUS) -> None:
        super().__init__(status)
        self.message = message

    def __str__(self) -> str:
        return self.message


def program_name(argv0: str | None = None) -> str:
    """Return the basename of *argv0* (default ``sys.argv[0]``)."""
    if argv0 is None:
        argv0 = sys.argv[0] if sys.argv and sys.argv[0] else "<unknown>"
    return Path(argv0).name or argv0


def truncate_message(message: str, limit: int) -> str:
    """Bound *message* to *limit* characters, marking any truncation.

    Examples
    --------
    >>> truncate_message("abcdefghij", 8)
    'abcde...'
    >>> truncate_message("short", 8)
    'short'
    """
    if limit <= 0 or len(message) <= limit:
        return message
    keep = max(limit - len(TRUNCATION_MARKER), 0)
    return message[:keep] + TRUNCATION_MARKER


class DiagnosticSink:
    """Routes diagnostics to the selected backend.

    Parameters
    ----------
    program:
        Name used as the ``<prog>:`` prefix and syslog ident.  Defaults to
        the basename of ``sys.argv[0]``.
    selector:
        Initial destination.  Defaults to ``stderr``.
    max_message_length:
        Messages longer than this are cut and end with ``...``.  The errno
        description is appended after truncation.
    bus_channel:
        Error channel used when the ``cerebro`` destination is selected.

    Examples
    --------
    >>> with DiagnosticSink(program="lmtdiagnose", selector="stdout") as sink:
    ...     sink.report("hello")
    lmtdiagnose: hello
    """

    def __init__(
        self,
        program: str | None = None,
        selector: str = DEFAULT_SELECTOR,
        *,
        max_message_length: int = DEFAULT_MAX_MESSAGE_LENGTH,
        bus_channel: BusErrorChannel | None = None,
    ) -> None:
        self._program = program_name(program)
        self._max_length = max_message_length
        self._bus_channel = bus_channel
        # Emits and reselection share one lock: reselection closes the old
        # backend, so no emit may be in flight on it.
        self._lock = threading.RLock()
        self._backend: SinkBackend | None = None
        self._closed = False
        self._backend = open_backend(parse_selector(selector), self._program, bus_channel)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def program(self) -> str:
        return self._program

    def set_program_name(self, argv0: str) -> None:
        """Use the basename of *argv0* as the report prefix."""
        self._program = program_name(argv0)

    @property
    def destination(self) -> Destination:
        """The destination of the active backend."""
        return self._active().destination

    @property
    def backend(self) -> SinkBackend:
        return self._active()

    def select_destination(self, selector: str) -> None:
        """Replace the active backend with the one *selector* names.

        An unknown syslog facility or level, or a path that cannot be
        opened for append, is reported through the current backend and
        raises ``FatalError``.
        """
        with self._lock:
            try:
                destination = parse_selector(selector)
            except SelectorError as exc:
                self.report_fatal(str(exc))
            try:
                backend = open_backend(destination, self._program, self._bus_channel)
            except OSError as exc:
                self.report_with_errno_fatal(
                    exc.errno or 0, f"could not open {selector} for writing"
                )
            previous, self._backend = self._backend, None
            if previous is not None:
                previous.close()
            self._backend = backend
            self._closed = False
            logger.debug("Diagnostic destination set to %s", destination.to_selector())

    def current_destination(self) -> str:
        """Return the selector string for the active backend."""
        with self._lock:
            return self._active().destination.to_selector()

    # ------------------------------------------------------------------
    # Emit
    # ------------------------------------------------------------------

    def report(self, message: str) -> None:
        """Report *message* with no error suffix."""
        self._emit(truncate_message(message, self._max_length))

    def report_with_errno(self, errnum: int, message: str) -> None:
        """Report *message* followed by ``: <strerror(errnum)>``."""
        body = truncate_message(message, self._max_length)
        self._emit(f"{body}: {os.strerror(errnum)}")

    def report_os_error(self, exc: OSError, message: str) -> None:
        """Report *message* with the description of *exc*'s errno.

        Falls back to the exception text when it carries no errno.
        """
        if exc.errno:
            self.report_with_errno(exc.errno, message)
        else:
            self.report(f"{message}: {exc}")

    def report_fatal(self, message: str) -> NoReturn:
        """Report *message*, then raise ``FatalError``."""
        self.report(message)
        raise FatalError(message)

    def report_with_errno_fatal(self, errnum: int, message: str) -> NoReturn:
        """Report *message* with its errno description, then raise ``FatalError``."""
        self.report_with_errno(errnum, message)
        raise FatalError(f"{message}: {os.strerror(errnum)}")

    def fatal_error(self, message: str, file: str, line: int) -> NoReturn:
        """Report an internal consistency failure at *file*:*line* and exit."""
        self.report_fatal(f"fatal error: {message}: {file}::{line}")

    def _emit(self, body: str) -> None:
        with self._lock:
            backend = self._active()
            try:
                backend.emit(self._program, body)
            except (OSError, ValueError) as exc:
                # Emits never raise; write failures are only logged.
                logger.debug(
                    "Diagnostic write to %s failed: %s",
                    backend.destination.to_selector(),
                    exc,
                )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _active(self) -> SinkBackend:
        # A closed sink falls back to stderr so late reports still surface.
        if self._backend is None:
            self._backend = open_backend(
                parse_selector(DEFAULT_SELECTOR), self._program, self._bus_channel
            )
        return self._backend

    def close(self) -> None:
        """Release the active backend.  Safe to call more than once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            backend, self._backend = self._backend, None
            if backend is not None:
                backend.close()

    def __enter__(self) -> DiagnosticSink:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


# ---------------------------------------------------------------------------
# Process-wide instance
# ---------------------------------------------------------------------------

_sink: DiagnosticSink | None = None
_sink_lock = threading.Lock()


def get_sink() -> DiagnosticSink:
    """Return the process-wide sink, creating it from config on first use."""
    global _sink
    with _sink_lock:
        if _sink is None:
            from lmtdiag.config import config

            _sink = DiagnosticSink(
                selector=config.error_dest,
                max_message_length=config.max_message_length,
            )
        return _sink


def set_sink(sink: DiagnosticSink | None) -> DiagnosticSink | None:
    """Install *sink* as the process-wide instance, returning the previous one.

    The previous sink is not closed; its owner decides when to release it.
    """
    global _sink
    with _sink_lock:
        previous, _sink = _sink, sink
        return previous
