"""Backend protocol for the diagnostic sink.

A backend owns exactly one output resource (a stream, the syslog
connection, or a bus channel) for as long as it is installed in a
``DiagnosticSink``.  The sink is the only caller of ``close()``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from lmtdiag.models.sink import (
    BusDestination,
    Destination,
    FileDestination,
    SyslogDestination,
)

if TYPE_CHECKING:
    from lmtdiag.sink.backends.bus import BusErrorChannel


@runtime_checkable
class SinkBackend(Protocol):
    """Protocol that every diagnostic backend must implement.

    Attributes
    ----------
    destination : Destination
        The destination this backend was opened from.
    """

    @property
    def destination(self) -> Destination:
        ...

    def emit(self, program: str, body: str) -> None:
        """Write one formatted diagnostic.

        *body* is the already formatted message, including the
        ``: <strerror>`` suffix for errno reports.  Backends decide whether
        to prefix it with *program*.
        """
        ...

    def close(self) -> None:
        """Release the backend's resource.  Called at most once."""
        ...


def open_backend(
    destination: Destination,
    program: str,
    bus_channel: BusErrorChannel | None = None,
) -> SinkBackend:
    """Open the backend matching *destination*.

    Raises
    ------
    OSError
        If a file destination cannot be opened for append.
    """
    from lmtdiag.sink.backends.bus import BusBackend
    from lmtdiag.sink.backends.stream import FileBackend
    from lmtdiag.sink.backends.system_log import SyslogBackend

    if isinstance(destination, FileDestination):
        return FileBackend.open(destination)
    if isinstance(destination, SyslogDestination):
        return SyslogBackend.open(destination, program)
    if isinstance(destination, BusDestination):
        return BusBackend(destination, bus_channel)
    raise TypeError(f"unsupported destination: {destination!r}")
