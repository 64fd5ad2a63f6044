"""lmtdiag: error visibility for the Lustre Monitoring Tool.

Two pieces:
  - DiagnosticSink: reports ``<prog>: <message>`` diagnostics to a file,
    the system log, or the Cerebro error channel, selected at runtime from
    a single selector string.
  - RecordDispatcher: pulls LMT metrics off Cerebro, routes each record to
    the decoder for its (name, schema version) pair, and reports every
    record that fails without stopping the scan.
"""

__version__ = "0.1.0"
__description__ = "Diagnostic sink and versioned telemetry checker for LMT"

from lmtdiag.dispatch.dispatcher import RecordDispatcher
from lmtdiag.sink.diagnostics import DiagnosticSink, FatalError, get_sink

__all__ = ["DiagnosticSink", "FatalError", "RecordDispatcher", "get_sink", "__version__"]
