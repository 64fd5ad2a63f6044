"""Selector strings — the persisted form of a sink destination.

Grammar::

    stdout | stderr                     standard streams (never closed)
    syslog                              syslog, facility daemon, level err
    syslog:<facility>[:<severity>]      syslog with explicit parameters
    cerebro                             monitoring bus error channel
    <anything else>                     path opened for append

This grammar appears in existing configuration files and must stay stable.
"""

from __future__ import annotations

from lmtdiag.models.sink import (
    BusDestination,
    Destination,
    Facility,
    FileDestination,
    Severity,
    SyslogDestination,
)

SYSLOG_PREFIX = "syslog:"


class SelectorError(ValueError):
    """Raised for a selector naming an unknown syslog facility or level."""


def _facility(token: str) -> Facility:
    try:
        return Facility(token)
    except ValueError:
        raise SelectorError(f"unknown syslog facility: {token}") from None


def _severity(token: str) -> Severity:
    try:
        return Severity(token)
    except ValueError:
        raise SelectorError(f"unknown syslog level: {token}") from None


def parse_selector(selector: str) -> Destination:
    """Parse *selector* into a destination without opening anything.

    Examples
    --------
    >>> parse_selector("syslog:local3").to_selector()
    'syslog:local3:err'
    >>> parse_selector("/var/log/lmt.log").target
    '/var/log/lmt.log'

    Raises
    ------
    SelectorError
        If a ``syslog:`` selector carries an unknown (or empty) facility
        or level token.
    """
    if selector == "syslog":
        return SyslogDestination()
    if selector.startswith(SYSLOG_PREFIX):
        fac, sep, lev = selector[len(SYSLOG_PREFIX):].partition(":")
        facility = _facility(fac)
        if not sep:
            return SyslogDestination(facility=facility)
        return SyslogDestination(facility=facility, severity=_severity(lev))
    if selector == "cerebro":
        return BusDestination()
    return FileDestination(target=selector)


def format_selector(destination: Destination) -> str:
    """Render *destination* back into the selector grammar."""
    return destination.to_selector()
