"""Record dispatch — version-routes telemetry records to their decoders.

Records are pulled off the monitoring bus, their leading version token is
parsed, and each is handed to the decoder registered for its exact
``(name, version)`` pair.  One bad record never stops the scan.
"""

from lmtdiag.dispatch.dispatcher import RecordDispatcher
from lmtdiag.dispatch.registry import (
    CURRENT_METRIC_NAMES,
    LEGACY_METRIC_NAMES,
    METRIC_NAMES,
    DecoderRegistry,
    default_registry,
)

__all__ = [
    "CURRENT_METRIC_NAMES",
    "LEGACY_METRIC_NAMES",
    "METRIC_NAMES",
    "DecoderRegistry",
    "RecordDispatcher",
    "default_registry",
]
