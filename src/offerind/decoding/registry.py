"""Registry helpers.

This module exposes:
- `add_event_spec(registry, spec)` → append one spec (lowercases key)
- `spec_by_name(registry, name)` → look a spec up by event name
"""

from __future__ import annotations

from offerind.decoding.specs import EventRegistry, EventSpec


def add_event_spec(registry: EventRegistry, spec: EventSpec) -> None:
    """Insert one spec into the registry keyed by lowercased topic0."""
    registry[spec.topic0.lower()] = spec


def spec_by_name(registry: EventRegistry, name: str) -> EventSpec | None:
    for spec in registry.values():
        if spec.name == name:
            return spec
    return None
