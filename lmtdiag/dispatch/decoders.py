"""Structural decoders for the LMT metric strings.

Each decoder checks that a raw value is well-formed for one schema
generation: the right number of ``;``-separated fields, with numeric
fields that parse.  Values are returned but never interpreted.

Layouts (every value starts with its version field)::

    lmt_oss v1     1;oss;pct_cpu;pct_mem;
    lmt_router v1  1;router;pct_cpu;pct_mem;bytes;
    lmt_ost v1     1;oss;ost;read_bytes;write_bytes;kbytes_free;kbytes_total;
                   inodes_free;inodes_total;
    lmt_mds v2     2;mds;mdt;pct_cpu;pct_mem;inodes_free;inodes_total;
                   kbytes_free;kbytes_total;{opname;samples;sum;sumsq;}*
    lmt_ost v2     2;oss;pct_cpu;pct_mem;<per-OST body>
    lmt_mdt v1     1;mds;pct_cpu;pct_mem;<per-MDT body>

The per-target bodies of ``lmt_ost v2`` and ``lmt_mdt v1`` are passed
through unparsed.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any

from lmtdiag.models.telemetry import DecodeOutcome

MDOPS_GROUP = ("opname", "samples", "sum", "sumsq")


class _DecodeError(ValueError):
    pass


def _fields(raw: str) -> list[str]:
    parts = raw.split(";")
    if parts and parts[-1] == "":
        parts.pop()
    return parts


def _float(label: str, token: str) -> float:
    try:
        return float(token)
    except ValueError:
        raise _DecodeError(f"{label}: not a number: {token!r}") from None


def _count(label: str, token: str) -> int:
    try:
        value = int(token)
    except ValueError:
        raise _DecodeError(f"{label}: not an integer: {token!r}") from None
    if value < 0:
        raise _DecodeError(f"{label}: negative value {value}")
    return value


def _name(label: str, token: str) -> str:
    if not token:
        raise _DecodeError(f"{label}: empty name")
    return token


def _expect(parts: list[str], count: int, *, at_least: bool = False) -> None:
    if len(parts) < count or (not at_least and len(parts) != count):
        qualifier = "at least " if at_least else ""
        raise _DecodeError(f"expected {qualifier}{count} fields, got {len(parts)}")


def _decoder(func: Callable[[list[str]], dict[str, Any]]) -> Callable[[str], DecodeOutcome]:
    @wraps(func)
    def decode(raw: str) -> DecodeOutcome:
        try:
            return DecodeOutcome.success(func(_fields(raw)))
        except _DecodeError as exc:
            return DecodeOutcome.failure(str(exc))

    return decode


def _host_header(parts: list[str]) -> dict[str, Any]:
    return {
        "name": _name("name", parts[1]),
        "pct_cpu": _float("pct_cpu", parts[2]),
        "pct_mem": _float("pct_mem", parts[3]),
    }


@_decoder
def decode_oss_v1(parts: list[str]) -> dict[str, Any]:
    _expect(parts, 4)
    return _host_header(parts)


@_decoder
def decode_router_v1(parts: list[str]) -> dict[str, Any]:
    _expect(parts, 5)
    values = _host_header(parts)
    values["bytes"] = _count("bytes", parts[4])
    return values


@_decoder
def decode_ost_v1(parts: list[str]) -> dict[str, Any]:
    _expect(parts, 9)
    counters = (
        "read_bytes",
        "write_bytes",
        "kbytes_free",
        "kbytes_total",
        "inodes_free",
        "inodes_total",
    )
    values: dict[str, Any] = {
        "ossname": _name("ossname", parts[1]),
        "name": _name("name", parts[2]),
    }
    for label, token in zip(counters, parts[3:9]):
        values[label] = _count(label, token)
    return values


@_decoder
def decode_mds_v2(parts: list[str]) -> dict[str, Any]:
    _expect(parts, 9, at_least=True)
    values: dict[str, Any] = {
        "mdsname": _name("mdsname", parts[1]),
        "name": _name("name", parts[2]),
        "pct_cpu": _float("pct_cpu", parts[3]),
        "pct_mem": _float("pct_mem", parts[4]),
        "inodes_free": _count("inodes_free", parts[5]),
        "inodes_total": _count("inodes_total", parts[6]),
        "kbytes_free": _count("kbytes_free", parts[7]),
        "kbytes_total": _count("kbytes_total", parts[8]),
    }
    ops = parts[9:]
    if len(ops) % len(MDOPS_GROUP):
        raise _DecodeError(f"mdops: incomplete operation group ({len(ops)} fields)")
    mdops = []
    for i in range(0, len(ops), len(MDOPS_GROUP)):
        opname, samples, total, sumsq = ops[i:i + len(MDOPS_GROUP)]
        mdops.append({
            "opname": _name("opname", opname),
            "samples": _count(f"{opname}.samples", samples),
            "sum": _count(f"{opname}.sum", total),
            "sumsq": _count(f"{opname}.sumsq", sumsq),
        })
    values["mdops"] = mdops
    return values


@_decoder
def decode_ost_v2(parts: list[str]) -> dict[str, Any]:
    _expect(parts, 4, at_least=True)
    values = _host_header(parts)
    values["body"] = parts[4:]
    return values


@_decoder
def decode_mdt_v1(parts: list[str]) -> dict[str, Any]:
    _expect(parts, 4, at_least=True)
    values = _host_header(parts)
    values["body"] = parts[4:]
    return values
