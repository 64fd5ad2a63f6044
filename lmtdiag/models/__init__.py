"""lmtdiag data models — all Pydantic v2, all frozen (immutable)."""

from lmtdiag.models.sink import (
    RESERVED_STREAMS,
    BusDestination,
    Destination,
    Facility,
    FileDestination,
    Severity,
    SyslogDestination,
)
from lmtdiag.models.telemetry import (
    DataSourceHandle,
    DecodeOutcome,
    FailureKind,
    MalformedVersionError,
    ScanReport,
    SoftFailure,
    TelemetryRecord,
)

__all__ = [
    # sink
    "RESERVED_STREAMS",
    "BusDestination",
    "Destination",
    "Facility",
    "FileDestination",
    "Severity",
    "SyslogDestination",
    # telemetry
    "DataSourceHandle",
    "DecodeOutcome",
    "FailureKind",
    "MalformedVersionError",
    "ScanReport",
    "SoftFailure",
    "TelemetryRecord",
]
