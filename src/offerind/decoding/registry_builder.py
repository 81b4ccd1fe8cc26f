"""Build event registries from Solidity event signatures.

    make_registry(["Bought(address indexed buyer)", "Completed()"])

A parameter reads `<type> [indexed] [name]`; unnamed parameters become
`arg<position>`. Tuple parameters are rejected: offer events use none, and a
contract that does can be loaded from its ABI instead.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from eth_utils import keccak

from .specs import DataFieldSpec, EventRegistry, EventSpec, Projection, ProjectionRefs, TopicFieldSpec

_SIGNATURE = re.compile(r"^\s*(\w+)\s*\((.*)\)\s*$")


def _parse_param(fragment: str, position: int) -> tuple[str, str, bool]:
    """`"address indexed seller"` → `("seller", "address", True)`."""
    tokens = fragment.split()
    indexed = "indexed" in tokens
    tokens = [t for t in tokens if t != "indexed"]
    if not tokens or len(tokens) > 2 or "(" in fragment or ")" in fragment:
        raise ValueError(f"unsupported event parameter {fragment.strip()!r}")
    name = tokens[1] if len(tokens) == 2 else f"arg{position}"
    return name, tokens[0], indexed


def event_spec_from_signature(signature: str, projection: Projection | None = None) -> EventSpec:
    """Build an EventSpec; by default every field is projected under its own name."""
    match = _SIGNATURE.match(signature)
    if match is None:
        raise ValueError(f"Invalid event signature: {signature}")
    name, params = match.groups()
    parsed = [_parse_param(p, i) for i, p in enumerate(params.split(",")) if p.strip()]

    topic0 = "0x" + keccak(text=f"{name}({','.join(typ for _, typ, _ in parsed)})").hex()
    indexed = [(n, t) for n, t, is_indexed in parsed if is_indexed]
    data = [(n, t) for n, t, is_indexed in parsed if not is_indexed]

    if projection is None:
        projection = {
            **{n: ProjectionRefs.TopicRef(name=n) for n, _ in indexed},
            **{n: ProjectionRefs.DataRef(name=n) for n, _ in data},
        }

    return EventSpec(
        topic0=topic0,
        name=name,
        topic_fields=[TopicFieldSpec(n, i + 1, t) for i, (n, t) in enumerate(indexed)],
        data_fields=[DataFieldSpec(n, i, t) for i, (n, t) in enumerate(data)],
        projection=projection,
    )


def make_registry(signatures: str | Iterable[str]) -> EventRegistry:
    """Registry keyed by topic0 for one or several signatures."""
    if isinstance(signatures, str):
        signatures = [signatures]
    specs = (event_spec_from_signature(sig) for sig in signatures)
    return {spec.topic0: spec for spec in specs}
