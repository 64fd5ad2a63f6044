"""Syslog backend — one ``openlog``/``closelog`` pair per installation.

The facility and level are fixed when the backend is opened; every
message through it is logged at that level.

The syslog connection is process-wide.  The backend that called
``openlog`` last owns it, and only the owner may call ``closelog``: a
sink installs its new backend before releasing the old one, so a
syslog-to-syslog switch must not tear down the new connection.
"""

from __future__ import annotations

import logging
import syslog
import threading

from lmtdiag.models.sink import Facility, Severity, SyslogDestination

logger = logging.getLogger(__name__)

FACILITY_CODES: dict[Facility, int] = {
    Facility.DAEMON: syslog.LOG_DAEMON,
    Facility.LOCAL0: syslog.LOG_LOCAL0,
    Facility.LOCAL1: syslog.LOG_LOCAL1,
    Facility.LOCAL2: syslog.LOG_LOCAL2,
    Facility.LOCAL3: syslog.LOG_LOCAL3,
    Facility.LOCAL4: syslog.LOG_LOCAL4,
    Facility.LOCAL5: syslog.LOG_LOCAL5,
    Facility.LOCAL6: syslog.LOG_LOCAL6,
    Facility.LOCAL7: syslog.LOG_LOCAL7,
    Facility.USER: syslog.LOG_USER,
}

SEVERITY_CODES: dict[Severity, int] = {
    Severity.EMERG: syslog.LOG_EMERG,
    Severity.ALERT: syslog.LOG_ALERT,
    Severity.CRIT: syslog.LOG_CRIT,
    Severity.ERR: syslog.LOG_ERR,
    Severity.WARNING: syslog.LOG_WARNING,
    Severity.NOTICE: syslog.LOG_NOTICE,
    Severity.INFO: syslog.LOG_INFO,
    Severity.DEBUG: syslog.LOG_DEBUG,
}

# Backend whose openlog() call configured the current connection.
_owner: SyslogBackend | None = None
_owner_lock = threading.Lock()


class SyslogBackend:
    """Sends diagnostics to the system log.

    The program name is passed to ``openlog`` as the ident, so messages
    are logged without a ``<prog>:`` prefix.
    """

    def __init__(self, destination: SyslogDestination) -> None:
        self._destination = destination
        self._priority = SEVERITY_CODES[destination.severity]
        self._closed = False

    @classmethod
    def open(cls, destination: SyslogDestination, program: str) -> SyslogBackend:
        global _owner
        backend = cls(destination)
        with _owner_lock:
            syslog.openlog(
                program,
                syslog.LOG_NDELAY | syslog.LOG_PID,
                FACILITY_CODES[destination.facility],
            )
            _owner = backend
        logger.debug("SyslogBackend: opened %s", destination.to_selector())
        return backend

    @property
    def owns_connection(self) -> bool:
        """Whether this backend's ``openlog`` configured the live connection."""
        return _owner is self

    @property
    def destination(self) -> SyslogDestination:
        return self._destination

    @property
    def closed(self) -> bool:
        return self._closed

    def emit(self, program: str, body: str) -> None:
        syslog.syslog(self._priority, body)

    def close(self) -> None:
        if self._closed:
            return
        global _owner
        self._closed = True
        with _owner_lock:
            if _owner is not self:
                logger.debug(
                    "SyslogBackend: %s superseded, connection left open",
                    self._destination.to_selector(),
                )
                return
            syslog.closelog()
            _owner = None
        logger.debug("SyslogBackend: closed %s", self._destination.to_selector())
