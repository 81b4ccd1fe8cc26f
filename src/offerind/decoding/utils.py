"""Decoding utilities: typed topic parsers and topic filter encoding."""

from __future__ import annotations

from typing import Any

from eth_utils import keccak

from offerind.core.errors import DecodeError

from .specs import TopicFieldSpec


def _is_dynamic(typ: str) -> bool:
    return typ in ("string", "bytes") or typ.endswith("]") or typ.startswith("(")


def parse_topic_field(topic_hex: str, spec: TopicFieldSpec) -> Any:
    """Parse one indexed topic according to the declared type."""
    t = spec.type
    h = topic_hex.lower()
    if len(h) != 66 or not h.startswith("0x"):
        raise DecodeError(f"topic for {spec.name!r} is not a 32-byte word: {topic_hex}")
    if t == "address":
        return "0x" + h[-40:]
    if t == "bool":
        return int(h, 16) != 0
    if t.startswith("uint"):
        return int(h, 16)
    if t.startswith("int"):
        v = int(h, 16)
        bits = int(t[3:]) if t != "int" else 256
        if v >= 2 ** (bits - 1):
            v -= 2**bits
        return v
    # bytesN and dynamic types (keccak of the value): raw hex string
    return h


def encode_topic_value(value: Any, typ: str) -> str:
    """Encode a filter value as the 32-byte topic an indexed `typ` field produces."""
    if _is_dynamic(typ):
        raw = value.encode() if isinstance(value, str) else bytes(value)
        return "0x" + keccak(raw).hex()
    if typ == "address":
        return "0x" + str(value).lower().removeprefix("0x").rjust(64, "0")
    if typ == "bool":
        return "0x" + format(int(bool(value)), "064x")
    if typ.startswith("uint") or typ.startswith("int"):
        return "0x" + (int(value) % 2**256).to_bytes(32, "big").hex()
    if typ.startswith("bytes"):
        size = int(typ[5:])
        if isinstance(value, str):
            raw = bytes.fromhex(value[2:]) if value.startswith("0x") else value.encode("ascii")
        else:
            raw = bytes(value)
        if len(raw) > size:
            raise ValueError(f"value does not fit in {typ}: {value!r}")
        return "0x" + raw.ljust(32, b"\x00").hex()
    raise ValueError(f"unsupported indexed type {typ!r}")
