"""Event specification primitives and registry typing.

Defines lightweight dataclasses to describe how to decode events:
- `TopicFieldSpec` / `DataFieldSpec`: typed sources for indexed topics / data values
- `EventSpec`: one event rule (topic0, fields, normalized projection)
- `EventRegistry`: mapping from topic0 → EventSpec
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any


# ---- Projection mapping ----
# Keys: normalized field names (e.g., "ships_from", "price")
# Values: references to raw event fields or constant strings
#   - ProjectionRefs.TopicRef(name="<name>")  → take from parsed indexed topic fields
#   - ProjectionRefs.DataRef(name="<name>")   → take from decoded data values
#   - ProjectionRefs.Constant(value="value")  → output a constant string
class ProjectionRefs:
    @dataclass(kw_only=True)
    class TopicRef:
        name: str

    @dataclass(kw_only=True)
    class DataRef:
        name: str

    @dataclass(kw_only=True)
    class Constant:
        value: str


ProjectionRef = ProjectionRefs.TopicRef | ProjectionRefs.DataRef | ProjectionRefs.Constant | None

Projection = Mapping[str, ProjectionRef]


def resolve_projection_ref(
    ref: ProjectionRef,
    topic_vals: dict[str, Any],
    data_vals: dict[str, Any],
) -> Any:
    """Resolve a projection reference"""
    if ref is None:
        return None
    match ref:
        case ProjectionRefs.TopicRef():
            return topic_vals.get(ref.name)
        case ProjectionRefs.DataRef():
            return data_vals.get(ref.name)
        case ProjectionRefs.Constant():
            return ref.value
    raise RuntimeError("Unsupported ProjectionEntry type")


@dataclass(frozen=True)
class TopicFieldSpec:
    """Describe one indexed topic field (by 0-based topic index and ABI type)."""

    name: str
    index: int
    type: str  # e.g., "address", "uint256", "bytes32"


@dataclass(frozen=True)
class DataFieldSpec:
    """Describe one non-indexed value in the data section (0-based position)."""

    name: str
    position: int
    type: str  # e.g., "address", "uint256", "string"


@dataclass(frozen=True)
class EventSpec:
    """One event decoding rule + normalized projection."""

    topic0: str
    name: str
    topic_fields: list[TopicFieldSpec]
    data_fields: list[DataFieldSpec]
    projection: Projection

    def __post_init__(self):
        def _find_matches(ref_name: str, fields: Sequence[TopicFieldSpec | DataFieldSpec]):
            return [field for field in fields if field.name == ref_name]

        for name, projection_ref in self.projection.items():
            if not isinstance(projection_ref, ProjectionRef):
                raise ValueError(f"{name} projection is not a ProjectionRef instance")
            match projection_ref:
                case ProjectionRefs.TopicRef():
                    matches = _find_matches(projection_ref.name, self.topic_fields)
                    if len(matches) == 0:
                        raise ValueError(f"{name} projection refers to an non-existant topic field")
                case ProjectionRefs.DataRef():
                    matches = _find_matches(projection_ref.name, self.data_fields)
                    if len(matches) == 0:
                        raise ValueError(f"{name} projection refers to an non-existant data field")

    @property
    def data_types(self) -> list[str]:
        return [df.type for df in sorted(self.data_fields, key=lambda df: df.position)]

    def topic_field(self, name: str) -> TopicFieldSpec | None:
        for tf in self.topic_fields:
            if tf.name == name:
                return tf
        return None

    def ref_for(self, raw_name: str) -> ProjectionRef:
        """Projection reference pointing at the raw field `raw_name`."""
        if self.topic_field(raw_name) is not None:
            return ProjectionRefs.TopicRef(name=raw_name)
        for df in self.data_fields:
            if df.name == raw_name:
                return ProjectionRefs.DataRef(name=raw_name)
        raise ValueError(f"{self.name} has no field named {raw_name!r}")

    def reprojected(self, renames: Mapping[str, str]) -> EventSpec:
        """Return a copy projecting raw field `k` onto normalized name `renames[k]`."""
        return replace(self, projection={out: self.ref_for(raw) for raw, out in renames.items()})


# The full registry keyed by topic0 (lowercased 0x-hex).
EventRegistry = dict[str, EventSpec]
