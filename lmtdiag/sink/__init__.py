"""Diagnostic sink — reports operator-facing messages to one backend.

The active backend is a file (or standard stream), the system log, or the
monitoring bus error channel, selected at runtime by a selector string.
"""

from lmtdiag.sink.diagnostics import (
    DiagnosticSink,
    FatalError,
    get_sink,
    set_sink,
)
from lmtdiag.sink.selector import SelectorError, format_selector, parse_selector

__all__ = [
    "DiagnosticSink",
    "FatalError",
    "SelectorError",
    "format_selector",
    "get_sink",
    "parse_selector",
    "set_sink",
]
