"""File backend — appends ``<prog>: <message>`` lines to a stream.

Each line is flushed as soon as it is written so a crash never loses the
last diagnostic.  The reserved targets ``stdout`` and ``stderr`` are
looked up on ``sys`` at write time and are never closed.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from lmtdiag.models.sink import FileDestination

logger = logging.getLogger(__name__)


class FileBackend:
    """Writes diagnostics to a file or standard stream.

    Use ``FileBackend.open()`` rather than the constructor; it opens the
    path for append when the destination is not a reserved stream.
    """

    def __init__(self, destination: FileDestination, stream: TextIO | None = None) -> None:
        self._destination = destination
        self._stream = stream
        self._closed = False

    @classmethod
    def open(cls, destination: FileDestination) -> FileBackend:
        """Open *destination* for append.

        Raises
        ------
        OSError
            If the path cannot be opened.
        """
        if destination.is_reserved:
            return cls(destination)
        stream = open(destination.target, "a", encoding="utf-8")
        logger.debug("FileBackend: opened %s for append", destination.target)
        return cls(destination, stream)

    @property
    def destination(self) -> FileDestination:
        return self._destination

    @property
    def stream(self) -> TextIO:
        if self._stream is not None:
            return self._stream
        return getattr(sys, self._destination.target)

    @property
    def closed(self) -> bool:
        return self._closed

    def emit(self, program: str, body: str) -> None:
        stream = self.stream
        stream.write(f"{program}: {body}\n")
        stream.flush()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._stream is not None:
            self._stream.close()
            logger.debug("FileBackend: closed %s", self._destination.target)
