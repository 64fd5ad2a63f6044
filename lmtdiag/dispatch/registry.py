"""Decoder registry — maps ``(metric name, schema version)`` to a decoder.

The dispatcher looks decoders up by the exact pair; nothing is inferred
from the name or version.  New schema generations are supported by
registering another pair, without touching dispatch logic.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

from lmtdiag.models.telemetry import DecodeOutcome

logger = logging.getLogger(__name__)

Decoder = Callable[[str], DecodeOutcome]
RouteKey = tuple[str, int]

CURRENT_METRIC_NAMES: tuple[str, ...] = ("lmt_mdt", "lmt_ost", "lmt_router")
LEGACY_METRIC_NAMES: tuple[str, ...] = ("lmt_oss", "lmt_mds")
METRIC_NAMES: tuple[str, ...] = CURRENT_METRIC_NAMES + LEGACY_METRIC_NAMES


class DecoderRegistry:
    """Fixed lookup table of decoders.

    Examples
    --------
    >>> registry = DecoderRegistry()
    >>> registry.register("lmt_oss", 1, lambda raw: DecodeOutcome.success({}))
    >>> ("lmt_oss", 1) in registry
    True
    >>> registry.lookup("lmt_oss", 2) is None
    True
    """

    def __init__(self) -> None:
        self._decoders: dict[RouteKey, Decoder] = {}

    def register(
        self,
        name: str,
        version: int,
        decoder: Decoder,
        *,
        replace: bool = False,
    ) -> None:
        """Register *decoder* for ``(name, version)``.

        Raises
        ------
        ValueError
            If the pair already has a decoder and *replace* is false.
        """
        key = (name, version)
        if key in self._decoders and not replace:
            raise ValueError(f"decoder for {name}_v{version} is already registered")
        self._decoders[key] = decoder
        logger.debug("Registered decoder %s_v%d", name, version)

    def unregister(self, name: str, version: int) -> bool:
        """Remove the decoder for ``(name, version)``; ``False`` if absent."""
        return self._decoders.pop((name, version), None) is not None

    def lookup(self, name: str, version: int) -> Decoder | None:
        return self._decoders.get((name, version))

    def entries(self) -> list[RouteKey]:
        """Registered pairs, sorted by name then version."""
        return sorted(self._decoders)

    def metric_names(self) -> list[str]:
        """Distinct metric names with at least one registered version."""
        return sorted({name for name, _ in self._decoders})

    def versions(self, name: str) -> list[int]:
        return sorted(v for n, v in self._decoders if n == name)

    def __contains__(self, key: object) -> bool:
        return key in self._decoders

    def __len__(self) -> int:
        return len(self._decoders)

    def __iter__(self) -> Iterator[RouteKey]:
        return iter(self.entries())


def default_registry() -> DecoderRegistry:
    """Registry with decoders for every schema generation LMT publishes."""
    from lmtdiag.dispatch import decoders

    registry = DecoderRegistry()
    registry.register("lmt_ost", 2, decoders.decode_ost_v2)
    registry.register("lmt_mdt", 1, decoders.decode_mdt_v1)
    registry.register("lmt_router", 1, decoders.decode_router_v1)
    registry.register("lmt_mds", 2, decoders.decode_mds_v2)
    registry.register("lmt_oss", 1, decoders.decode_oss_v1)
    registry.register("lmt_ost", 1, decoders.decode_ost_v1)
    return registry
