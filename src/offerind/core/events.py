"""Event vocabulary: raw offer events → normalized event models.

`CHANGE_MAPPING` pairs every single-field "*Changed" raw event with the
offer attribute it updates. Live subscriptions, historical resync and the
registry projections all iterate this table; adding a mutable attribute
only requires a new row (and its signature).

`normalize_log` is the single decode path shared by live and historical
delivery.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from offerind.core.constants import OfferEvent
from offerind.core.errors import DecodeError
from offerind.core.interfaces import IEventCodec
from offerind.core.models import (
    BoughtEvent,
    BuyerRejectedEvent,
    CancelledEvent,
    ChangedEvent,
    CompletedEvent,
    CreatedEvent,
    EventKind,
    EventLog,
    OfferEventModel,
)


@dataclass(frozen=True)
class ChangeMap:
    event: OfferEvent
    obj_field: str  # normalized attribute
    eth_field: str  # raw event parameter


CHANGE_MAPPING: tuple[ChangeMap, ...] = (
    ChangeMap(OfferEvent.TITLE_CHANGED, "title", "newTitle"),
    ChangeMap(OfferEvent.PRICE_CHANGED, "price", "newPrice"),
    ChangeMap(OfferEvent.CATEGORY_CHANGED, "category", "newCategory"),
    ChangeMap(OfferEvent.SHIPS_FROM_CHANGED, "ships_from", "newShipsFrom"),
    ChangeMap(OfferEvent.ATTACHED_FILES_CHANGED, "attached_files", "newCID"),
)

CHANGE_BY_EVENT: dict[OfferEvent, ChangeMap] = {row.event: row for row in CHANGE_MAPPING}

# Families backed by exactly one raw event
SIMPLE_EVENTS: dict[EventKind, OfferEvent] = {
    EventKind.CREATED: OfferEvent.CREATED,
    EventKind.COMPLETED: OfferEvent.COMPLETED,
    EventKind.CANCELLED: OfferEvent.CANCELLED,
    EventKind.BOUGHT: OfferEvent.BOUGHT,
    EventKind.BUYER_REJECTED: OfferEvent.BUYER_REJECTED,
}

# Raw parameter name → normalized name, for events that are not "*Changed"
CREATED_FIELDS: dict[str, str] = {
    "seller": "seller",
    "title": "title",
    "price": "price",
    "category": "category",
    "shipsFrom": "ships_from",
    "attachedFiles": "attached_files",
}

SIMPLE_FIELDS: dict[OfferEvent, dict[str, str]] = {
    OfferEvent.CREATED: CREATED_FIELDS,
    OfferEvent.BOUGHT: {"buyer": "buyer"},
    OfferEvent.COMPLETED: {},
    OfferEvent.CANCELLED: {},
    OfferEvent.BUYER_REJECTED: {},
}


def projection_renames(event: OfferEvent) -> dict[str, str]:
    """Raw → normalized field names projected for `event`."""
    row = CHANGE_BY_EVENT.get(event)
    if row is not None:
        return {row.eth_field: row.obj_field}
    return SIMPLE_FIELDS[event]


def family_of(event: OfferEvent) -> EventKind:
    if event in CHANGE_BY_EVENT:
        return EventKind.CHANGED
    for kind, raw in SIMPLE_EVENTS.items():
        if raw is event:
            return kind
    raise ValueError(f"unknown offer event {event!r}")


def _require(values: dict[str, Any], name: str, event: OfferEvent) -> Any:
    try:
        return values[name]
    except KeyError:
        raise DecodeError(f"{event.value}: decoded log has no {name!r} field") from None


def build_event(event: OfferEvent, values: dict[str, Any]) -> OfferEventModel:
    """Build the normalized model for one decoded raw event."""
    offer = _require(values, "offer", event)
    row = CHANGE_BY_EVENT.get(event)
    if row is not None:
        return ChangedEvent(offer=offer, field=row.obj_field, value=_require(values, row.obj_field, event))

    match event:
        case OfferEvent.CREATED:
            return CreatedEvent(
                offer=offer,
                **{name: _require(values, name, event) for name in CREATED_FIELDS.values()},
            )
        case OfferEvent.BOUGHT:
            return BoughtEvent(offer=offer, buyer=_require(values, "buyer", event))
        case OfferEvent.COMPLETED:
            return CompletedEvent(offer=offer)
        case OfferEvent.CANCELLED:
            return CancelledEvent(offer=offer)
        case OfferEvent.BUYER_REJECTED:
            return BuyerRejectedEvent(offer=offer)
    raise ValueError(f"unknown offer event {event!r}")


def normalize_log(codec: IEventCodec, event: OfferEvent, log: EventLog) -> OfferEventModel:
    """Decode `log` as `event` and build its normalized model."""
    return build_event(event, codec.decode(event.value, log))
