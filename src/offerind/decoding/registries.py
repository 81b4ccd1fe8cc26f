"""Offer contract event registry.

The registry is built from the Solidity signatures in
`offerind.core.constants.OFFER_EVENT_SIGNATURES`, or from a contract ABI
when the deployed contract differs. Either way every spec is re-projected
onto normalized field names (`shipsFrom` → `ships_from`, `newCID` →
`attached_files`, ...) using the same tables the sync engine uses.

Example
-------
>>> from offerind.decoding.registries import make_offer_registry
>>> reg = make_offer_registry()
"""

from __future__ import annotations

from offerind.abi_events import AbiSpec, make_event_registry_from_abi
from offerind.core.constants import OFFER_EVENT_SIGNATURES, OfferEvent
from offerind.core.events import projection_renames

from .registry import add_event_spec
from .registry_builder import make_registry
from .specs import EventRegistry


def make_offer_registry(abi: AbiSpec | None = None) -> EventRegistry:
    """Return the registry of all offer events, projected onto normalized names.

    Raises ValueError when a required offer event is missing from `abi`.
    """
    source = make_registry(OFFER_EVENT_SIGNATURES) if abi is None else make_event_registry_from_abi(abi)
    by_name = {spec.name: spec for spec in source.values()}

    reg: EventRegistry = {}
    for event in OfferEvent:
        spec = by_name.get(event.value)
        if spec is None:
            raise ValueError(f"event {event.value} is not declared by the contract ABI")
        add_event_spec(reg, spec.reprojected(projection_renames(event)))
    return reg
