"""Generic event decoder using projections.

This module translates raw logs into `ParsedEvent` using an `EventRegistry`
defined by `EventSpec` + (topic|data) field specs. Indexed fields are parsed
from topics; non-indexed fields are ABI-decoded from the data section with
`eth_abi`, so dynamic types (string, bytes) are supported.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from eth_abi import decode as abi_decode
from eth_abi.exceptions import DecodingError

from offerind.core.errors import DecodeError
from offerind.core.models import EventLog
from offerind.decoding.specs import EventRegistry, EventSpec, resolve_projection_ref
from offerind.decoding.utils import parse_topic_field

# ---------- parsed event ----------


@dataclass(slots=True)
class ParsedEvent:
    """Decoded event with projected `values` (raw Python types)."""

    name: str
    log: EventLog
    values: dict[str, Any]


# ---------- helper functions ----------


def _get_spec(topics: tuple[str, ...], registry: EventRegistry) -> EventSpec | None:
    """Retrieve event spec from registry by topic0, None if absent."""
    if not topics:
        return None
    return registry.get(topics[0].lower())


def _parse_topics(spec: EventSpec, topics: tuple[str, ...]) -> dict[str, Any]:
    topic_vals: dict[str, Any] = {}
    for tf in spec.topic_fields:
        if tf.index >= len(topics):
            raise DecodeError(f"{spec.name}: missing topic {tf.index} ({tf.name})")
        topic_vals[tf.name] = parse_topic_field(topics[tf.index], tf)
    return topic_vals


def _parse_data(spec: EventSpec, data: bytes) -> dict[str, Any]:
    if not spec.data_fields:
        return {}
    try:
        decoded = abi_decode(spec.data_types, data)
    except (DecodingError, UnicodeDecodeError, ValueError, OverflowError) as e:
        raise DecodeError(f"{spec.name}: cannot decode data section: {e}") from e
    ordered = sorted(spec.data_fields, key=lambda df: df.position)
    return {df.name: value for df, value in zip(ordered, decoded)}


# ---------- main generic decoder ----------


def decode_event(
    *,
    log: EventLog,
    registry: EventRegistry,
) -> ParsedEvent | None:
    """Decode a raw log into a `ParsedEvent`.

    Returns None when the log's topic0 is not in the registry. Raises
    `DecodeError` when the log matches a spec but cannot be decoded.
    """
    spec = _get_spec(log.topics, registry)
    if spec is None:
        return None

    try:
        data = log.data
    except ValueError as e:
        raise DecodeError(f"{spec.name}: data is not hex: {log.data_hex[:20]}") from e

    topic_vals = _parse_topics(spec, log.topics)
    data_vals = _parse_data(spec, data)

    resolved: dict[str, Any] = {}
    for out_key, ref in spec.projection.items():
        resolved[out_key] = resolve_projection_ref(ref, topic_vals, data_vals)

    return ParsedEvent(
        name=spec.name,
        log=log,
        values=resolved,
    )
