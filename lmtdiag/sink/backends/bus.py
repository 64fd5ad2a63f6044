"""Monitoring bus backend — forwards diagnostics to the bus error channel.

The Cerebro client library reports its own errors through a single output
hook; this backend feeds our diagnostics into the same channel so they
land wherever the bus is configured to send its errors.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from lmtdiag.models.sink import BusDestination

logger = logging.getLogger(__name__)


@runtime_checkable
class BusErrorChannel(Protocol):
    """The monitoring bus's error output hook."""

    def error_output(self, text: str) -> None:
        ...


class LoggingBusChannel:
    """Default channel: hands text to the ``lmtdiag.bus`` logger at ERROR."""

    def __init__(self, logger_name: str = "lmtdiag.bus") -> None:
        self._logger = logging.getLogger(logger_name)

    def error_output(self, text: str) -> None:
        self._logger.error("%s", text)


class BusBackend:
    """Forwards ``<message>`` (no program prefix) to a ``BusErrorChannel``."""

    def __init__(
        self,
        destination: BusDestination | None = None,
        channel: BusErrorChannel | None = None,
    ) -> None:
        self._destination = destination or BusDestination()
        self._channel = channel or LoggingBusChannel()

    @property
    def destination(self) -> BusDestination:
        return self._destination

    @property
    def channel(self) -> BusErrorChannel:
        return self._channel

    def emit(self, program: str, body: str) -> None:
        self._channel.error_output(body)

    def close(self) -> None:
        logger.debug("BusBackend: detached from %s", type(self._channel).__name__)
