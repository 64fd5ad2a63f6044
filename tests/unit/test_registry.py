"""Unit tests for DecoderRegistry."""

from __future__ import annotations

import pytest

from lmtdiag.dispatch.registry import (
    CURRENT_METRIC_NAMES,
    LEGACY_METRIC_NAMES,
    METRIC_NAMES,
    DecoderRegistry,
    default_registry,
)
from lmtdiag.models.telemetry import DecodeOutcome


def _ok(raw: str) -> DecodeOutcome:
    return DecodeOutcome.success({})


def _other(raw: str) -> DecodeOutcome:
    return DecodeOutcome.failure("other")


class TestDecoderRegistry:
    def test_register_and_lookup(self):
        registry = DecoderRegistry()
        registry.register("lmt_oss", 1, _ok)
        assert registry.lookup("lmt_oss", 1) is _ok
        assert ("lmt_oss", 1) in registry
        assert len(registry) == 1

    def test_lookup_is_exact(self):
        registry = DecoderRegistry()
        registry.register("lmt_ost", 1, _ok)
        assert registry.lookup("lmt_ost", 2) is None
        assert registry.lookup("lmt_oss", 1) is None

    def test_duplicate_rejected(self):
        registry = DecoderRegistry()
        registry.register("lmt_oss", 1, _ok)
        with pytest.raises(ValueError, match="lmt_oss_v1"):
            registry.register("lmt_oss", 1, _other)
        assert registry.lookup("lmt_oss", 1) is _ok

    def test_replace(self):
        registry = DecoderRegistry()
        registry.register("lmt_oss", 1, _ok)
        registry.register("lmt_oss", 1, _other, replace=True)
        assert registry.lookup("lmt_oss", 1) is _other

    def test_unregister(self):
        registry = DecoderRegistry()
        registry.register("lmt_oss", 1, _ok)
        assert registry.unregister("lmt_oss", 1) is True
        assert registry.unregister("lmt_oss", 1) is False
        assert len(registry) == 0

    def test_entries_sorted(self):
        registry = DecoderRegistry()
        registry.register("lmt_ost", 2, _ok)
        registry.register("lmt_mdt", 1, _ok)
        registry.register("lmt_ost", 1, _ok)
        assert registry.entries() == [("lmt_mdt", 1), ("lmt_ost", 1), ("lmt_ost", 2)]
        assert list(registry) == registry.entries()
        assert registry.versions("lmt_ost") == [1, 2]


class TestDefaultRegistry:
    def test_shipped_pairs(self):
        assert default_registry().entries() == [
            ("lmt_mds", 2),
            ("lmt_mdt", 1),
            ("lmt_oss", 1),
            ("lmt_ost", 1),
            ("lmt_ost", 2),
            ("lmt_router", 1),
        ]

    def test_every_metric_name_has_a_decoder(self):
        assert set(default_registry().metric_names()) == set(METRIC_NAMES)

    def test_name_groups(self):
        assert METRIC_NAMES == CURRENT_METRIC_NAMES + LEGACY_METRIC_NAMES
        assert "lmt_ost" in CURRENT_METRIC_NAMES
        assert "lmt_oss" in LEGACY_METRIC_NAMES
