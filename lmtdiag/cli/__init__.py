"""lmtdiag CLI — Typer-based command-line interface.

Provides the ``lmtdiag`` command: ``check`` runs the telemetry scan and
catalog check, ``decoders`` lists supported metric versions, and ``dest``
validates a diagnostic destination selector.

Tables and summaries use Rich; diagnostics go through the sink.
"""
