"""Diagnostic sink destinations — one tagged variant per backend.

A destination is pure data: it names *where* diagnostics go and carries
the parameters needed to open that backend, nothing else.  The resource
itself (stream or syslog handle) is owned by the backend opened from it.

Every destination can be rendered back into the selector grammar with
``to_selector()``; parsing that string yields an equal destination.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

RESERVED_STREAMS: frozenset[str] = frozenset({"stdout", "stderr"})


class Facility(str, Enum):
    """Syslog facilities accepted in ``syslog:<facility>`` selectors."""

    DAEMON = "daemon"
    LOCAL0 = "local0"
    LOCAL1 = "local1"
    LOCAL2 = "local2"
    LOCAL3 = "local3"
    LOCAL4 = "local4"
    LOCAL5 = "local5"
    LOCAL6 = "local6"
    LOCAL7 = "local7"
    USER = "user"


class Severity(str, Enum):
    """Syslog levels accepted in ``syslog:<facility>:<severity>`` selectors."""

    EMERG = "emerg"
    ALERT = "alert"
    CRIT = "crit"
    ERR = "err"
    WARNING = "warning"
    NOTICE = "notice"
    INFO = "info"
    DEBUG = "debug"


class FileDestination(BaseModel):
    """Append diagnostics to a file, or to one of the standard streams.

    ``target`` is stored exactly as it was selected so that
    ``to_selector()`` hands back the same string.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["file"] = "file"
    target: str

    @property
    def is_reserved(self) -> bool:
        """Whether this names ``stdout``/``stderr`` rather than a path."""
        return self.target in RESERVED_STREAMS

    def to_selector(self) -> str:
        return self.target


class SyslogDestination(BaseModel):
    """Send diagnostics to the system log at a fixed facility and level."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["syslog"] = "syslog"
    facility: Facility = Facility.DAEMON
    severity: Severity = Severity.ERR

    def to_selector(self) -> str:
        return f"syslog:{self.facility.value}:{self.severity.value}"


class BusDestination(BaseModel):
    """Forward diagnostics to the monitoring bus's own error channel."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["cerebro"] = "cerebro"

    def to_selector(self) -> str:
        return "cerebro"


Destination = Annotated[
    Union[FileDestination, SyslogDestination, BusDestination],
    Field(discriminator="kind"),
]
