"""Event decoding with projections.

This package provides:
- Event specification system (EventSpec, TopicFieldSpec, DataFieldSpec)
- Generic decoder that translates raw logs into ParsedEvent objects
- Field mappers converting ABI values into normalized offer fields
- The offer event registry and the ABI-driven `AbiEventCodec`
"""

from offerind.decoding.specs import (
    DataFieldSpec,
    EventRegistry,
    EventSpec,
    Projection,
    ProjectionRefs,
    TopicFieldSpec,
)
from offerind.decoding.registry import add_event_spec, spec_by_name
from offerind.decoding.decoder import ParsedEvent, decode_event
from offerind.decoding.registry_builder import event_spec_from_signature, make_registry
from offerind.decoding.registries import make_offer_registry
from offerind.decoding.codec import AbiEventCodec

__all__ = [
    "ParsedEvent",
    "decode_event",
    "add_event_spec",
    "spec_by_name",
    "event_spec_from_signature",
    "make_registry",
    "make_offer_registry",
    "AbiEventCodec",
    "DataFieldSpec",
    "EventRegistry",
    "EventSpec",
    "Projection",
    "ProjectionRefs",
    "TopicFieldSpec",
]
