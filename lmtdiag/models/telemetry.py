"""Telemetry records, decoder outcomes, and scan results.

All models are transient: they live for one dispatch iteration and carry
no identity beyond it.
"""

from __future__ import annotations

import math
import re
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

# ASCII decimal, optionally with an exponent.
_VERSION_TOKEN = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?", re.ASCII)


class MalformedVersionError(ValueError):
    """Raised when a raw metric value does not start with ``<version>;``."""


class TelemetryRecord(BaseModel):
    """One named, versioned metric value taken off the monitoring bus.

    ``version`` is the routing version (the leading token truncated to an
    integer); ``version_token`` keeps the token as it appeared on the wire.
    ``payload`` is the complete raw value, version field included, since
    decoders parse the whole string.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    version: int
    version_token: str
    payload: str

    @classmethod
    def from_wire(cls, name: str, raw: str) -> TelemetryRecord:
        """Build a record from a raw ``<version>;<fields...>`` value.

        Raises
        ------
        MalformedVersionError
            If the value has no ``;`` terminator or the leading token is
            not a finite decimal number.
        """
        token, sep, _ = raw.partition(";")
        if not sep:
            raise MalformedVersionError(f"{name}: no version terminator")
        token = token.strip()
        if not _VERSION_TOKEN.fullmatch(token):
            raise MalformedVersionError(f"{name}: bad version token {token!r}")
        try:
            value = float(token)
        except ValueError:
            raise MalformedVersionError(
                f"{name}: bad version token {token!r}"
            ) from None
        if not math.isfinite(value):
            raise MalformedVersionError(f"{name}: bad version token {token!r}")
        return cls(name=name, version=int(value), version_token=token, payload=raw)

    @property
    def route_key(self) -> tuple[str, int]:
        return (self.name, self.version)

    @property
    def label(self) -> str:
        """``<name>_v<version>``, the prefix used in diagnostics."""
        return f"{self.name}_v{self.version}"


class DecodeOutcome(BaseModel):
    """Result of running a decoder over a raw value.

    Exactly one of ``values`` (success) or the failure pair
    ``reason``/``errnum`` is meaningful.  A failure with neither set means
    the caller should fall back to a system error description.
    """

    model_config = ConfigDict(frozen=True)

    values: dict[str, Any] | None = None
    reason: str | None = None
    errnum: int | None = None

    @property
    def ok(self) -> bool:
        return self.values is not None

    @classmethod
    def success(cls, values: dict[str, Any]) -> DecodeOutcome:
        return cls(values=values)

    @classmethod
    def failure(cls, reason: str | None = None, errnum: int | None = None) -> DecodeOutcome:
        return cls(reason=reason, errnum=errnum)


@runtime_checkable
class DataSourceHandle(Protocol):
    """A configured data source as enumerated by a catalog.

    Handles are owned by the catalog that produced them; callers only read
    the display name.
    """

    def display_name(self) -> str:
        ...


class FailureKind(str, Enum):
    """Why a single record could not be validated."""

    MALFORMED_VERSION = "malformed_version"
    UNKNOWN_VERSION = "unknown_version"
    DECODE_FAILED = "decode_failed"


class SoftFailure(BaseModel):
    """A per-record failure that was reported but did not stop the scan."""

    model_config = ConfigDict(frozen=True)

    metric: str
    version: int | None = None
    kind: FailureKind
    message: str


class ScanReport(BaseModel):
    """Summary of one pass over the telemetry batch."""

    model_config = ConfigDict(frozen=True)

    fetched: int = 0
    decoded: list[str] = Field(default_factory=list)
    skipped: int = 0
    failures: list[SoftFailure] = Field(default_factory=list)

    @property
    def clean(self) -> bool:
        """``True`` when every record with a value decoded."""
        return not self.failures
